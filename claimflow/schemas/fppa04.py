"""Schemas for the insurer's FPPA04 settlement form."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from claimflow.schemas.common import CamelModel, FormInputModel
from claimflow.schemas.enums import AdjustmentType, ClaimStatus


class FPPA04BaseCreate(FormInputModel):
    claim_id: UUID
    category_main: str = Field(..., min_length=1)
    category_sub: str = Field(..., min_length=1)


class FPPA04BaseUpdate(FormInputModel):
    main_type: Optional[str] = None
    sub_type: Optional[str] = None


class FPPA04ItemIn(FormInputModel):
    category: str = Field(..., min_length=1)
    description: str = ""
    total: float = 0
    exception: float = 0


class FPPA04ItemPatch(FormInputModel):
    category: Optional[str] = None
    description: Optional[str] = None
    total: Optional[float] = None
    exception: Optional[float] = None


class FPPA04AdjustmentIn(FormInputModel):
    type: AdjustmentType
    description: str = ""
    amount: float = 0


class FPPA04AdjustmentPatch(FormInputModel):
    type: Optional[AdjustmentType] = None
    description: Optional[str] = None
    amount: Optional[float] = None


class FPPA04CPMFields(FormInputModel):
    """Scalar fields of the CPM variant, all optional."""

    event_type: Optional[str] = None
    claim_ref_number: Optional[str] = None
    event_description: Optional[str] = None
    production_year: Optional[int] = None
    accident_date: Optional[date] = None
    reported_date: Optional[date] = None
    received_doc_date: Optional[date] = None
    company: Optional[str] = None
    factory: Optional[str] = None
    policy_number: Optional[str] = None
    surveyor_ref_number: Optional[str] = None
    net_amount: Optional[float] = None
    insurance_payout: Optional[float] = None


class FPPA04CPMUpsert(FPPA04CPMFields):
    """Full CPM variant payload; items and adjustments replace the stored ones."""

    items: list[FPPA04ItemIn] = Field(default_factory=list)
    adjustments: list[FPPA04AdjustmentIn] = Field(default_factory=list)
    # Previously uploaded signature URLs to keep
    signature_urls: list[str] = Field(default_factory=list)


class FPPA04ItemResponse(CamelModel):
    id: UUID
    category: str
    description: str
    total: float
    exception: float


class FPPA04AdjustmentResponse(CamelModel):
    id: UUID
    type: AdjustmentType
    description: str
    amount: float


class FPPA04CPMResponse(CamelModel):
    id: UUID
    base_id: UUID
    event_type: Optional[str] = None
    claim_ref_number: Optional[str] = None
    event_description: Optional[str] = None
    production_year: Optional[int] = None
    accident_date: Optional[date] = None
    reported_date: Optional[date] = None
    received_doc_date: Optional[date] = None
    company: Optional[str] = None
    factory: Optional[str] = None
    policy_number: Optional[str] = None
    surveyor_ref_number: Optional[str] = None
    net_amount: float
    insurance_payout: Optional[float] = None
    signature_files: list[str] = Field(default_factory=list)
    items: list[FPPA04ItemResponse] = Field(default_factory=list)
    adjustments: list[FPPA04AdjustmentResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FPPA04BaseResponse(CamelModel):
    id: UUID
    claim_id: UUID
    main_type: str
    sub_type: str
    cpm_variant: Optional[FPPA04CPMResponse] = None
    created_at: Optional[datetime] = None


class FPPA04BaseEnvelope(CamelModel):
    base: FPPA04BaseResponse


class FPPA04VariantEnvelope(CamelModel):
    variant: FPPA04CPMResponse


class FPPA04ClaimSummary(CamelModel):
    id: UUID
    category_main: str
    category_sub: str
    status: ClaimStatus
    created_by_name: str
    approver_name: Optional[str] = None
    insurer_comment: Optional[str] = None
    created_at: datetime
    submitted_at: Optional[datetime] = None


class FPPA04FormResponse(CamelModel):
    form: Optional[FPPA04CPMResponse] = None
    claim: FPPA04ClaimSummary


class FPPA04ListEntry(CamelModel):
    id: UUID = Field(..., description="Claim ID")
    created_at: datetime


class FPPA04ListResponse(CamelModel):
    claims: list[FPPA04ListEntry] = Field(default_factory=list)


class FPPA04ItemEnvelope(CamelModel):
    item: FPPA04ItemResponse


class FPPA04AdjustmentEnvelope(CamelModel):
    adjustment: FPPA04AdjustmentResponse
