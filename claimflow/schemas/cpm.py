"""Schemas for the claimant's CPM accident form."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from claimflow.schemas.common import CamelModel, FormInputModel

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CPMFormFields(FormInputModel):
    """Every CPM form field, all optional; used for partial updates."""

    accident_date: Optional[date] = None
    accident_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    location: Optional[str] = None
    cause: Optional[str] = None
    repair_shop: Optional[str] = None
    police_date: Optional[date] = None
    police_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    police_station: Optional[str] = None
    damage_own_type: Optional[str] = None
    damage_other_own: Optional[str] = None
    damage_detail: Optional[str] = None
    damage_amount: Optional[float] = Field(None, ge=0)
    victim_detail: Optional[str] = None
    partner_name: Optional[str] = None
    partner_phone: Optional[str] = None
    partner_location: Optional[str] = None
    partner_damage_detail: Optional[str] = None
    partner_damage_amount: Optional[float] = Field(None, ge=0)
    partner_victim_detail: Optional[str] = None


class CPMFormCreate(CPMFormFields):
    """Fields required when a claimant files the CPM form for the first time."""

    accident_date: date
    accident_time: str = Field(..., pattern=TIME_PATTERN)
    location: str
    cause: str
    damage_own_type: str


class CPMFormResponse(CamelModel):
    id: UUID
    claim_id: UUID
    accident_date: date
    accident_time: str
    location: str
    cause: str
    repair_shop: Optional[str] = None
    police_date: Optional[date] = None
    police_time: Optional[str] = None
    police_station: Optional[str] = None
    damage_own_type: str
    damage_other_own: Optional[str] = None
    damage_detail: Optional[str] = None
    damage_amount: Optional[float] = None
    victim_detail: Optional[str] = None
    partner_name: Optional[str] = None
    partner_phone: Optional[str] = None
    partner_location: Optional[str] = None
    partner_damage_detail: Optional[str] = None
    partner_damage_amount: Optional[float] = None
    partner_victim_detail: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CPMFormCreatedResponse(CamelModel):
    success: bool = True
    cpm_form: CPMFormResponse
