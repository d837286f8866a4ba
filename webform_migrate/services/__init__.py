"""Service layer for the webform migrator."""

from .component_mapper import ComponentMapper, with_synthetic_components
from .confirmation import build_confirmation, confirmation_type
from .email_mapper import EmailHandlerMapper
from .serialized import decode_extra
from .submission_mapper import collect_values, map_submission

__all__ = [
    "ComponentMapper",
    "with_synthetic_components",
    "build_confirmation",
    "confirmation_type",
    "EmailHandlerMapper",
    "decode_extra",
    "collect_values",
    "map_submission",
]
