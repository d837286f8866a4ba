"""Migration execution models."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid


class MigrationStatus(str, Enum):
    """Status of a migration run or of one form within it."""
    PENDING = "pending"
    CREATING_FORM = "creating_form"
    IMPORTING_COMPONENTS = "importing_components"
    IMPORTING_SUBMISSIONS = "importing_submissions"
    LINKING_NODE = "linking_node"
    ATTACHING_HANDLERS = "attaching_handlers"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class FormStep:
    """Progress of a single legacy form within a migration run."""
    nid: int
    webform_id: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    components_imported: int = 0
    components_skipped: bool = False
    submissions_processed: int = 0
    submissions_succeeded: int = 0
    submissions_failed: int = 0
    submissions_skipped: int = 0
    last_sid: Optional[int] = None
    node_linked: bool = False
    handlers_attached: int = 0
    # legacy sid -> id the target gave the imported submission
    target_ids: Dict[int, Optional[str]] = field(default_factory=dict)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "nid": self.nid,
            "webform_id": self.webform_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "components_imported": self.components_imported,
            "components_skipped": self.components_skipped,
            "submissions_processed": self.submissions_processed,
            "submissions_succeeded": self.submissions_succeeded,
            "submissions_failed": self.submissions_failed,
            "submissions_skipped": self.submissions_skipped,
            "last_sid": self.last_sid,
            "node_linked": self.node_linked,
            "handlers_attached": self.handlers_attached,
            "target_ids": self.target_ids,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """A complete migration run over one or more legacy forms."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MigrationStatus = MigrationStatus.PENDING
    simulate: bool = False

    # Timing
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Progress
    forms: List[FormStep] = field(default_factory=list)

    # Statistics
    total_submissions_processed: int = 0
    total_submissions_succeeded: int = 0
    total_submissions_failed: int = 0

    # Error report shown at the end of the run
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "status": self.status.value,
            "simulate": self.simulate,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "forms": [f.to_dict() for f in self.forms],
            "total_submissions_processed": self.total_submissions_processed,
            "total_submissions_succeeded": self.total_submissions_succeeded,
            "total_submissions_failed": self.total_submissions_failed,
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_form(self, nid: int) -> FormStep:
        """Add a new form to the run."""
        step = FormStep(nid=nid, webform_id=f"webform_{nid}")
        self.forms.append(step)
        return step

    def get_form(self, nid: int) -> Optional[FormStep]:
        """Get the step for a legacy form."""
        for step in self.forms:
            if step.nid == nid:
                return step
        return None

    def add_error(self, message: str, **details: Any) -> None:
        """Record an error for the end-of-run report."""
        error = {
            "error": message,
            "timestamp": datetime.utcnow().isoformat(),
        }
        error.update(details)
        self.errors.append(error)

    def update_totals(self) -> None:
        """Update total statistics from form steps."""
        self.total_submissions_processed = sum(f.submissions_processed for f in self.forms)
        self.total_submissions_succeeded = sum(f.submissions_succeeded for f in self.forms)
        self.total_submissions_failed = sum(f.submissions_failed for f in self.forms)


@dataclass
class MigrationConfig:
    """Configuration for a migration."""
    # Legacy database (any SQLAlchemy URL)
    legacy_db_url: str = ""

    # Target platform
    target_url: str = ""
    target_api_key: Optional[str] = None
    target_auth_type: str = "bearer"
    target_endpoints: Dict[str, str] = field(default_factory=dict)

    # Options
    nid: Optional[int] = None
    simulate: bool = False
    new_only: bool = False
    max_submissions: Optional[int] = None

    # Persisted state and output
    state_file: str = "./data/state.json"
    output_dir: str = "./data"
    save_report: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "legacy_db_url": self.legacy_db_url,
            "target_url": self.target_url,
            "target_auth_type": self.target_auth_type,
            "target_endpoints": self.target_endpoints,
            "nid": self.nid,
            "simulate": self.simulate,
            "new_only": self.new_only,
            "max_submissions": self.max_submissions,
            "state_file": self.state_file,
            "output_dir": self.output_dir,
            "save_report": self.save_report,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation, falling back to the environment."""
        max_submissions = data.get("max_submissions")
        nid = data.get("nid")
        return cls(
            legacy_db_url=data.get("legacy_db_url") or os.environ.get("WEBFORM_LEGACY_DB_URL", ""),
            target_url=data.get("target_url") or os.environ.get("WEBFORM_TARGET_URL", ""),
            target_api_key=data.get("target_api_key") or os.environ.get("WEBFORM_TARGET_API_KEY"),
            target_auth_type=data.get("target_auth_type", "bearer"),
            target_endpoints=data.get("target_endpoints", {}),
            nid=int(nid) if nid is not None else None,
            simulate=data.get("simulate", False),
            new_only=data.get("new_only", False),
            max_submissions=int(max_submissions) if max_submissions is not None else None,
            state_file=data.get("state_file", "./data/state.json"),
            output_dir=data.get("output_dir", "./data"),
            save_report=data.get("save_report", True),
        )
