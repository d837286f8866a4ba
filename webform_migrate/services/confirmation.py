"""Confirmation settings of migrated webforms."""

from typing import Optional

from ..models.legacy import LegacyForm
from ..models.target import ConfirmationSettings, ConfirmationType

# Legacy placeholder meaning "show the default confirmation page".
DEFAULT_CONFIRMATION = "<confirmation>"
# Legacy redirect value meaning "stay on the form".
NO_REDIRECT = "<none>"


def confirmation_type(message: Optional[str], url: Optional[str]) -> ConfirmationType:
    """
    Derive the confirmation type from a message and a redirect URL.

    Branches are checked in this order:
    message and url '<none>' -> message; message and url -> url_message;
    url only -> url; message only -> message; neither -> none.
    """
    if message and url == NO_REDIRECT:
        return ConfirmationType.MESSAGE
    if message and url:
        return ConfirmationType.URL_MESSAGE
    if not message and url:
        return ConfirmationType.URL
    if message and not url:
        return ConfirmationType.MESSAGE
    return ConfirmationType.NONE


def build_confirmation(form: LegacyForm) -> ConfirmationSettings:
    """Build confirmation settings from a legacy form row."""
    message = form.confirmation or ""
    if message == DEFAULT_CONFIRMATION:
        message = ""
    url = form.redirect_url or ""

    return ConfirmationSettings(
        confirmation_message=message,
        confirmation_url=url,
        confirmation_type=confirmation_type(message, url),
    )
