"""Mapping of legacy submissions to target submissions."""

from typing import Any, Dict, Iterable, Tuple

from ..models.legacy import LegacyForm, LegacySubmission
from ..models.target import TargetSubmission


def collect_values(rows: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Group submitted value rows by form key.

    A key seen once maps to its value; a key seen several times (multi-valued
    components such as checkboxes) maps to the list of values in row order.
    """
    data: Dict[str, Any] = {}
    for form_key, value in rows:
        if form_key not in data:
            data[form_key] = value
        elif isinstance(data[form_key], list):
            data[form_key].append(value)
        else:
            data[form_key] = [data[form_key], value]
    return data


def map_submission(form: LegacyForm, submission: LegacySubmission) -> TargetSubmission:
    """Build the target submission; values are copied untouched."""
    return TargetSubmission(
        webform_id=form.webform_id,
        sid=submission.sid,
        uid=submission.uid,
        remote_addr=submission.remote_addr,
        created=submission.submitted,
        data=dict(submission.data),
    )
