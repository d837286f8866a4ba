"""Data models for the webform migrator."""

from .legacy import (
    LegacyForm,
    LegacyComponent,
    LegacyConditional,
    LegacySubmission,
    LegacyEmail,
    parse_options,
)
from .target import (
    ConfirmationType,
    ConfirmationSettings,
    TargetSubmission,
    EmailHandlerConfig,
)
from .migration import (
    MigrationConfig,
    MigrationRun,
    FormStep,
    MigrationStatus,
)

__all__ = [
    "LegacyForm",
    "LegacyComponent",
    "LegacyConditional",
    "LegacySubmission",
    "LegacyEmail",
    "parse_options",
    "ConfirmationType",
    "ConfirmationSettings",
    "TargetSubmission",
    "EmailHandlerConfig",
    "MigrationConfig",
    "MigrationRun",
    "FormStep",
    "MigrationStatus",
]
