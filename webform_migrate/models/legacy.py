"""Records read from the legacy webform tables."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime


@dataclass
class LegacyForm:
    """A legacy webform, keyed by the node it was attached to."""
    nid: int
    title: str
    confirmation: str = ""
    redirect_url: str = ""
    submit_text: str = ""

    @property
    def webform_id(self) -> str:
        """Machine name of the webform on the target platform."""
        return f"webform_{self.nid}"


@dataclass
class LegacyConditional:
    """'Show this component only when component `cid` has one of `values`'."""
    cid: int
    operator: str = "="
    values: List[str] = field(default_factory=list)

    @classmethod
    def from_extra(cls, extra: Dict[str, Any]) -> Optional["LegacyConditional"]:
        """Build from a decoded extra blob, or None when there is no rule."""
        cid = extra.get("webform_conditional_cid")
        if not cid:
            return None
        raw_values = extra.get("webform_conditional_field_value") or ""
        return cls(
            cid=int(cid),
            operator=extra.get("webform_conditional_operator") or "=",
            values=str(raw_values).splitlines(),
        )


@dataclass
class LegacyComponent:
    """A single field of a legacy webform."""
    cid: int
    form_key: str
    name: str
    type: str
    extra: Dict[str, Any] = field(default_factory=dict)
    required: bool = False
    value: str = ""
    weight: int = 0
    nid: Optional[int] = None

    @property
    def conditional(self) -> Optional[LegacyConditional]:
        return LegacyConditional.from_extra(self.extra)

    @property
    def items(self) -> str:
        """Raw 'key|label' option lines from the extra blob."""
        return str(self.extra.get("items") or "")

    def options(self) -> Dict[str, str]:
        """Decode the option list into an ordered key -> label mapping."""
        return parse_options(self.items)


@dataclass
class LegacySubmission:
    """A legacy submission together with its submitted values."""
    sid: int
    uid: int = 0
    remote_addr: str = ""
    submitted: Optional[datetime] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LegacyEmail:
    """One row of the legacy per-form email configuration."""
    eid: int
    email: str
    subject: str = "default"
    from_name: Optional[str] = None
    from_address: str = "default"
    template: str = "default"


def parse_options(items: str) -> Dict[str, str]:
    """
    Parse a newline-separated list of 'key|label' lines.

    Lines without a label use the key as label; blank lines are ignored.
    """
    options: Dict[str, str] = {}
    for line in items.splitlines():
        if not line.strip():
            continue
        key, sep, label = line.partition("|")
        options[key] = label if sep else key
    return options
