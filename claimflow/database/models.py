"""SQLAlchemy models for all database tables."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Date,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from claimflow.core.database import Base
from claimflow.schemas.enums import AdjustmentType, AttachmentType, ClaimStatus, UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    # Stored as VARCHAR + CHECK so the same schema works on Postgres and SQLite
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


Money = Numeric(14, 2, asdecimal=False)


class User(Base):
    """Employee account; approvers, managers and insurer staff are all users."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(
        _enum(UserRole, "user_role"), nullable=False, default=UserRole.USER
    )
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    employee_number: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )


class Claim(Base):
    """Accident claim header and aggregate root."""

    __tablename__ = "claims"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_main: Mapped[str] = mapped_column(String, nullable=False)
    category_sub: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[ClaimStatus] = mapped_column(
        _enum(ClaimStatus, "claim_status"), nullable=False, default=ClaimStatus.DRAFT, index=True
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    created_by_name: Mapped[str] = mapped_column(String, nullable=False)
    approver_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
    approver_name: Mapped[str | None] = mapped_column(String, nullable=True)
    insurer_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    cpm_form: Mapped["CPMForm | None"] = relationship(
        "CPMForm",
        back_populates="claim",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    fppa04_base: Mapped["FPPA04Base | None"] = relationship(
        "FPPA04Base",
        back_populates="claim",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    attachments: Mapped[list["Attachment"]] = relationship(
        "Attachment",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="Attachment.created_at",
        lazy="selectin",
    )
    status_events: Mapped[list["ClaimStatusEvent"]] = relationship(
        "ClaimStatusEvent",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="ClaimStatusEvent.created_at",
        lazy="selectin",
    )


class CPMForm(Base):
    """Accident details filed by the claimant (one per claim)."""

    __tablename__ = "cpm_forms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    accident_date: Mapped[date] = mapped_column(Date, nullable=False)
    accident_time: Mapped[str] = mapped_column(String(5), nullable=False, default="00:00")
    location: Mapped[str] = mapped_column(String, nullable=False, default="")
    cause: Mapped[str] = mapped_column(Text, nullable=False, default="")
    repair_shop: Mapped[str | None] = mapped_column(String, nullable=True)
    police_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    police_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    police_station: Mapped[str | None] = mapped_column(String, nullable=True)
    damage_own_type: Mapped[str] = mapped_column(String, nullable=False, default="")
    damage_other_own: Mapped[str | None] = mapped_column(String, nullable=True)
    damage_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    damage_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    victim_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    partner_name: Mapped[str | None] = mapped_column(String, nullable=True)
    partner_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    partner_location: Mapped[str | None] = mapped_column(String, nullable=True)
    partner_damage_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    partner_damage_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    partner_victim_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    claim: Mapped["Claim"] = relationship("Claim", back_populates="cpm_form")


class FPPA04Base(Base):
    """Insurer settlement form header (one per claim)."""

    __tablename__ = "fppa04_bases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    main_type: Mapped[str] = mapped_column(String, nullable=False)
    sub_type: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    claim: Mapped["Claim"] = relationship("Claim", back_populates="fppa04_base")
    cpm_variant: Mapped["FPPA04CPM | None"] = relationship(
        "FPPA04CPM",
        back_populates="base",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class FPPA04CPM(Base):
    """CPM variant of the FPPA04 settlement form."""

    __tablename__ = "fppa04_cpm"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    base_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fppa04_bases.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    event_type: Mapped[str | None] = mapped_column(String, nullable=True)
    claim_ref_number: Mapped[str | None] = mapped_column(String, nullable=True)
    event_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    production_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accident_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reported_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    received_doc_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    company: Mapped[str | None] = mapped_column(String, nullable=True)
    factory: Mapped[str | None] = mapped_column(String, nullable=True)
    policy_number: Mapped[str | None] = mapped_column(String, nullable=True)
    surveyor_ref_number: Mapped[str | None] = mapped_column(String, nullable=True)
    net_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    insurance_payout: Mapped[float | None] = mapped_column(Money, nullable=True)
    signature_files: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    base: Mapped["FPPA04Base"] = relationship("FPPA04Base", back_populates="cpm_variant")
    items: Mapped[list["FPPA04ItemCPM"]] = relationship(
        "FPPA04ItemCPM",
        back_populates="cpm",
        cascade="all, delete-orphan",
        order_by="FPPA04ItemCPM.position",
        lazy="selectin",
    )
    adjustments: Mapped[list["FPPA04AdjustmentCPM"]] = relationship(
        "FPPA04AdjustmentCPM",
        back_populates="cpm",
        cascade="all, delete-orphan",
        order_by="FPPA04AdjustmentCPM.position",
        lazy="selectin",
    )


class FPPA04ItemCPM(Base):
    """Damage line item on the FPPA04 CPM form."""

    __tablename__ = "fppa04_cpm_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    cpm_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fppa04_cpm.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    total: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    exception: Mapped[float] = mapped_column(Money, nullable=False, default=0)

    cpm: Mapped["FPPA04CPM"] = relationship("FPPA04CPM", back_populates="items")


class FPPA04AdjustmentCPM(Base):
    """Plus/minus adjustment line on the FPPA04 CPM form."""

    __tablename__ = "fppa04_cpm_adjustments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    cpm_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fppa04_cpm.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[AdjustmentType] = mapped_column(_enum(AdjustmentType, "adjustment_type"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    amount: Mapped[float] = mapped_column(Money, nullable=False, default=0)

    cpm: Mapped["FPPA04CPM"] = relationship("FPPA04CPM", back_populates="adjustments")


class Attachment(Base):
    """Uploaded document linked to a claim."""

    __tablename__ = "attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[AttachmentType] = mapped_column(_enum(AttachmentType, "attachment_type"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    claim: Mapped["Claim"] = relationship("Claim", back_populates="attachments")


class ClaimStatusEvent(Base):
    """Audit trail of status changes; feeds the claim timeline."""

    __tablename__ = "claim_status_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status: Mapped[ClaimStatus | None] = mapped_column(
        _enum(ClaimStatus, "event_from_status"), nullable=True
    )
    to_status: Mapped[ClaimStatus] = mapped_column(_enum(ClaimStatus, "event_to_status"), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    claim: Mapped["Claim"] = relationship("Claim", back_populates="status_events")
