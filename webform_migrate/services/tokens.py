"""Rewriting of legacy placeholder tokens into target platform tokens."""

import re
from typing import Dict

# Legacy user placeholders found in component default values.
USER_TOKENS: Dict[str, str] = {
    "%first_name": "[current-user:field_first_name]",
    "%last_name": "[current-user:field_last_name]",
    "%phone": "[current-user:field_user_phone]",
    "%country": "[current-user:field_user_country]",
    "%organization": "[current-user:field_user_organization]",
    "%designation": "[current-user:field_user_designation]",
}

# '%title' differs between plain-text subjects and twig-enabled bodies.
TITLE_TOKENS: Dict[str, str] = {
    "template": "{{ webform_token('[webform_submission:source-title]', webform_submission) }}",
    "subject": "[webform_submission:source-title]",
}

CURRENT_USER_MAIL = "[current-user:mail]"
ADD_TO_SCHEDULE_URL = "[webform_submission:add-to-schedule]"

VALUE_TOKEN_PATTERN = re.compile(r"%value\[([^\]]+)\]")


def replace_user_tokens(value: str) -> str:
    """Substitute legacy user placeholders in a default value."""
    for legacy, token in USER_TOKENS.items():
        value = value.replace(legacy, token)
    return value


def query_token(key: str) -> str:
    """Token that reads (and clears) a query string parameter of the current page."""
    return f"[current-page:query:{key}:clear]"


def submission_value_token(form_key: str) -> str:
    """Token for the raw submitted value of an element."""
    return f"[webform_submission:values:{form_key}:raw]"


def replace_template_tokens(template: str, kind: str = "template") -> str:
    """
    Rewrite legacy email tokens.

    '%title' becomes the source-title token (wrapped in twig for bodies) and
    every '%value[key]' becomes '{{ data.key }}'.

    Args:
        template: Legacy subject or body text
        kind: 'subject' or 'template'

    Returns:
        Text using target platform tokens
    """
    if kind not in TITLE_TOKENS:
        raise ValueError(f"Unknown template kind: {kind}")

    template = template.replace("%title", TITLE_TOKENS[kind])
    return VALUE_TOKEN_PATTERN.sub(lambda m: "{{ data." + m.group(1) + " }}", template)
