"""Exceptions raised by the webform migrator."""

from typing import Optional


class MigrationError(Exception):
    """Base class for all migration errors."""


class ComponentError(MigrationError):
    """A legacy component could not be turned into a target element."""

    def __init__(self, message: str, cid: Optional[int] = None, form_key: Optional[str] = None):
        super().__init__(message)
        self.cid = cid
        self.form_key = form_key


class LegacySourceError(MigrationError):
    """The legacy database returned something we cannot work with."""


class TargetPlatformError(MigrationError):
    """A write to the target platform failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
