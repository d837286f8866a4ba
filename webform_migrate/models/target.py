"""Records written to the target platform."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime


class ConfirmationType(str, Enum):
    """What the user sees after submitting a form."""
    NONE = "none"
    MESSAGE = "message"
    URL = "url"
    URL_MESSAGE = "url_message"


@dataclass
class ConfirmationSettings:
    """Confirmation behaviour of a target webform."""
    confirmation_message: str = ""
    confirmation_url: str = ""
    confirmation_type: ConfirmationType = ConfirmationType.NONE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the target platform's settings keys."""
        return {
            "confirmation_message": self.confirmation_message,
            "confirmation_url": self.confirmation_url,
            "confirmation_type": self.confirmation_type.value,
        }


@dataclass
class TargetSubmission:
    """A submission ready to be created on the target platform."""
    webform_id: str
    sid: int
    uid: int = 0
    remote_addr: str = ""
    created: Optional[datetime] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "webform_id": self.webform_id,
            "legacy_sid": self.sid,
            "uid": self.uid,
            "remote_addr": self.remote_addr,
            "created": int(self.created.timestamp()) if self.created else None,
            "data": self.data,
        }


@dataclass
class EmailHandlerConfig:
    """Configuration of an email handler plugin instance."""
    handler_id: str
    to_mail: str
    from_mail: str = "_default"
    from_name: str = "default"
    subject: str = "_default"
    body: str = "_default"
    states: List[str] = field(default_factory=lambda: ["completed"])
    label: str = "Email"
    status: bool = True
    weight: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the target platform's handler configuration."""
        return {
            "id": "email",
            "label": self.label,
            "handler_id": self.handler_id,
            "status": self.status,
            "weight": self.weight,
            "settings": {
                "states": list(self.states),
                "to_mail": self.to_mail,
                "to_options": [],
                "cc_mail": "",
                "cc_options": [],
                "bcc_mail": "",
                "bcc_options": [],
                "from_mail": self.from_mail,
                "from_options": [],
                "from_name": self.from_name,
                "subject": self.subject,
                "body": self.body,
                "excluded_elements": [],
                "html": True,
                "twig": True,
                "attachments": True,
                "debug": 0,
                "reply_to": "",
                "return_path": "",
            },
        }
