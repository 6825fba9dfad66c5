"""Database module for SQLAlchemy models."""

from claimflow.database.models import (
    Attachment,
    Claim,
    ClaimStatusEvent,
    CPMForm,
    FPPA04AdjustmentCPM,
    FPPA04Base,
    FPPA04CPM,
    FPPA04ItemCPM,
    User,
)

__all__ = [
    "Attachment",
    "Claim",
    "ClaimStatusEvent",
    "CPMForm",
    "FPPA04AdjustmentCPM",
    "FPPA04Base",
    "FPPA04CPM",
    "FPPA04ItemCPM",
    "User",
]
