"""Clients for the target webform platform."""

from .base import BaseTargetPlatform, SubmissionResult
from .webform_api import WebformAPIClient

__all__ = [
    "BaseTargetPlatform",
    "SubmissionResult",
    "WebformAPIClient",
]
