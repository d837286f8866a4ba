"""Mapping of legacy email settings to target email handlers."""

import logging
from typing import Dict, Iterable, List

from ..models.legacy import LegacyEmail, LegacyForm
from ..models.target import EmailHandlerConfig
from .tokens import replace_template_tokens, submission_value_token

logger = logging.getLogger(__name__)

LEGACY_DEFAULT = "default"
TARGET_DEFAULT = "_default"


class EmailHandlerMapper:
    """Turns legacy email rows of one form into email handler configurations."""

    def __init__(self, form: LegacyForm, component_keys: Dict[int, str]):
        """
        Initialize the mapper.

        Args:
            form: The legacy form the email rows belong to
            component_keys: cid -> form key for the components of the form
        """
        self.form = form
        self._keys_by_cid: Dict[str, str] = {str(cid): key for cid, key in component_keys.items()}

    def recipient(self, email: str) -> str:
        """
        Resolve the legacy 'email' column.

        A component id becomes the raw value token of that component; anything
        else (an address) is kept as is.
        """
        form_key = self._keys_by_cid.get(str(email).strip())
        if form_key:
            return submission_value_token(form_key)
        return email

    def map_email(self, email: LegacyEmail, index: int) -> EmailHandlerConfig:
        """
        Map a single legacy email row.

        Args:
            email: Legacy email configuration
            index: Position of the row within the form, used in the handler id

        Returns:
            EmailHandlerConfig for the target platform
        """
        subject = LEGACY_DEFAULT if email.subject is None else email.subject
        template = LEGACY_DEFAULT if email.template is None else email.template

        return EmailHandlerConfig(
            handler_id=f"{self.form.webform_id}_email_{index}",
            to_mail=self.recipient(email.email),
            from_mail=TARGET_DEFAULT if email.from_address == LEGACY_DEFAULT else email.from_address,
            from_name=email.from_name if email.from_name is not None else LEGACY_DEFAULT,
            subject=TARGET_DEFAULT if subject == LEGACY_DEFAULT else replace_template_tokens(subject, "subject"),
            body=TARGET_DEFAULT if template == LEGACY_DEFAULT else replace_template_tokens(template, "template"),
        )

    def map_all(self, emails: Iterable[LegacyEmail]) -> List[EmailHandlerConfig]:
        """Map every email row of the form, in legacy order."""
        handlers = [self.map_email(email, index) for index, email in enumerate(emails)]
        logger.debug(f"Form {self.form.nid}: mapped {len(handlers)} email handlers")
        return handlers
