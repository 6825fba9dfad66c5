"""Schemas for claim headers, the claim aggregate and workflow actions."""

from datetime import datetime
from typing import ClassVar, Optional
from uuid import UUID

from pydantic import Field

from claimflow.schemas.common import CamelModel, FormInputModel
from claimflow.schemas.cpm import CPMFormResponse
from claimflow.schemas.enums import AttachmentType, ClaimStatus
from claimflow.schemas.fppa04 import FPPA04BaseResponse


class ClaimCreateRequest(FormInputModel):
    category_main: str = Field(..., min_length=1)
    category_sub: str = Field(..., min_length=1)
    approver_id: UUID
    save_as_draft: bool = False


class ClaimPatch(FormInputModel):
    """Optional header fields of a claim update.

    ``status`` is not patchable; it only changes through workflow actions.
    """

    # An empty comment clears the stored one
    keep_blank: ClassVar[frozenset[str]] = frozenset({"insurer_comment"})

    category_main: Optional[str] = None
    category_sub: Optional[str] = None
    approver_id: Optional[UUID] = None
    insurer_comment: Optional[str] = None
    cause: Optional[str] = None


class ClaimActionRequest(CamelModel):
    action: str = Field(..., description="Workflow action, e.g. approve, reject, request_evidence")
    comment: Optional[str] = Field(None, description="Overwrites the insurer comment when non-empty")


class AttachmentResponse(CamelModel):
    id: UUID
    file_name: str
    url: str
    type: AttachmentType
    created_at: Optional[datetime] = None


class StatusEventResponse(CamelModel):
    from_status: Optional[ClaimStatus] = None
    to_status: ClaimStatus
    action: str
    actor_id: Optional[UUID] = None
    comment: Optional[str] = None
    created_at: datetime


class ClaimSummary(CamelModel):
    id: UUID
    status: ClaimStatus
    category_main: str
    category_sub: str
    created_at: datetime
    submitted_at: Optional[datetime] = None
    insurer_comment: Optional[str] = None
    created_by_id: UUID
    created_by_name: str
    approver_id: Optional[UUID] = None
    approver_name: Optional[str] = None
    cause: Optional[str] = None


class ClaimListResponse(CamelModel):
    claims: list[ClaimSummary] = Field(default_factory=list)


class ClaimDetail(CamelModel):
    """The full claim aggregate."""

    id: UUID
    status: ClaimStatus
    category_main: str
    category_sub: str
    created_by_id: UUID
    created_by_name: str
    approver_id: Optional[UUID] = None
    approver_name: Optional[str] = None
    insurer_comment: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    cpm_form: Optional[CPMFormResponse] = None
    fppa04_base: Optional[FPPA04BaseResponse] = None
    status_events: list[StatusEventResponse] = Field(default_factory=list)
    # Latest time the claim entered each status
    status_dates: dict[str, datetime] = Field(default_factory=dict)
    allowed_actions: list[str] = Field(default_factory=list)


class ClaimResponse(CamelModel):
    claim: ClaimDetail
