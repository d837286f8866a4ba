"""Decoding of the PHP-serialized 'extra' settings stored on legacy components."""

import logging
from typing import Any, Dict, Optional, Union

import phpserialize

from ..exceptions import ComponentError

logger = logging.getLogger(__name__)


def decode_extra(
    blob: Optional[Union[str, bytes]],
    cid: Optional[int] = None,
    form_key: Optional[str] = None
) -> Dict[str, Any]:
    """
    Decode a serialized extra blob into a plain dict.

    Args:
        blob: The raw value of the legacy 'extra' column
        cid: Component id, for error reporting
        form_key: Component form key, for error reporting

    Returns:
        Decoded settings; empty when the column is empty or serialized NULL

    Raises:
        ComponentError: If the blob is not a serialized array
    """
    if blob is None or blob == "" or blob == b"":
        return {}

    raw = blob.encode("utf-8") if isinstance(blob, str) else blob

    try:
        decoded = phpserialize.loads(raw, decode_strings=True)
    except ValueError as e:
        logger.error(f"Malformed extra settings for component {form_key} ({cid}): {e}")
        raise ComponentError(
            f"Malformed extra settings for component {form_key}: {e}",
            cid=cid,
            form_key=form_key,
        ) from e

    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ComponentError(
            f"Extra settings for component {form_key} are not an array",
            cid=cid,
            form_key=form_key,
        )

    return {_text(k): _normalize(v) for k, v in decoded.items()}


def _normalize(value: Any) -> Any:
    """Recursively turn decoded values into plain Python types."""
    if isinstance(value, dict):
        return {_text(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _text(key: Any) -> Any:
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="replace")
    return key


def flag(value: Any) -> int:
    """Read a legacy 0/1 flag that may be stored as int, string or bool."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1 if value else 0
