"""Readers for the legacy webform tables."""

from .base import BaseLegacyReader
from .legacy_db import LegacyDatabaseReader
from .tables import legacy_metadata

__all__ = [
    "BaseLegacyReader",
    "LegacyDatabaseReader",
    "legacy_metadata",
]
