"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field
from enum import Enum


class MigrationStatusEnum(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Request Models
class MigrationRunRequest(BaseModel):
    nid: Optional[int] = None
    simulate: bool = True
    new_only: bool = False
    max_submissions: Optional[int] = Field(default=None, ge=0)


class LegacyFormIn(BaseModel):
    nid: int
    title: str = ""
    confirmation: str = ""
    redirect_url: str = ""
    submit_text: str = ""


class LegacyComponentIn(BaseModel):
    cid: int
    form_key: str
    name: str = ""
    type: str
    # Either the decoded settings or the raw serialized blob
    extra: Union[Dict[str, Any], str] = Field(default_factory=dict)
    required: bool = False
    value: str = ""
    weight: int = 0


class ComponentPreviewRequest(BaseModel):
    form: LegacyFormIn
    component: LegacyComponentIn
    siblings: List[LegacyComponentIn] = Field(default_factory=list)


# Response Models
class FormResult(BaseModel):
    nid: int
    webform_id: str
    status: str
    components_imported: int = 0
    components_skipped: bool = False
    submissions_processed: int = 0
    submissions_succeeded: int = 0
    submissions_failed: int = 0
    submissions_skipped: int = 0
    node_linked: bool = False
    handlers_attached: int = 0
    warnings: List[str] = Field(default_factory=list)


class MigrationRunResponse(BaseModel):
    id: str
    status: MigrationStatusEnum
    simulate: bool
    forms: List[FormResult] = Field(default_factory=list)
    total_submissions_processed: int = 0
    total_submissions_succeeded: int = 0
    total_submissions_failed: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class ComponentPreviewResponse(BaseModel):
    form_key: str
    element: Dict[str, Any]


class DeleteSubmissionsResponse(BaseModel):
    webform_id: str
    deleted: int
