"""Repository for the claim aggregate.

The aggregate is a Claim plus its optional CPM form, optional FPPA04 base
(with CPM variant, items and adjustments), attachments and status events.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from claimflow.database.models import (
    Attachment,
    Claim,
    ClaimStatusEvent,
    CPMForm,
    FPPA04Base,
    FPPA04CPM,
    User,
)
from claimflow.repositories.base_repository import BaseRepository
from claimflow.schemas.enums import AttachmentType, ClaimStatus


@dataclass
class ClaimFilter:
    """Criteria for listing claims. ``None`` means "do not filter"."""

    user_email: Optional[str] = None
    approver_id: Optional[UUID] = None
    status: Optional[ClaimStatus] = None
    exclude_status: Optional[ClaimStatus] = None
    category_main: Optional[str] = None
    category_sub: Optional[str] = None


def _aggregate_options():
    variant = selectinload(Claim.fppa04_base).selectinload(FPPA04Base.cpm_variant)
    return (
        selectinload(Claim.cpm_form),
        selectinload(Claim.attachments),
        selectinload(Claim.status_events),
        variant.selectinload(FPPA04CPM.items),
        variant.selectinload(FPPA04CPM.adjustments),
    )


class ClaimRepository(BaseRepository[Claim]):
    """Repository for Claim aggregate operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Claim)

    async def get_aggregate(self, claim_id: UUID) -> Optional[Claim]:
        """Load a claim with every sub-form and collection, refreshing cached state.

        Args:
            claim_id: Claim ID

        Returns:
            The fully loaded claim or None
        """
        stmt = (
            select(Claim)
            .where(Claim.id == claim_id)
            .options(*_aggregate_options())
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading claim aggregate {claim_id}: {e}", exc_info=True)
            raise

    async def list_summaries(self, criteria: ClaimFilter) -> Sequence[Any]:
        """List claim summary rows, newest first.

        Each row carries the claim header columns plus ``cause`` from the
        nested CPM form (None when the claim has no CPM form yet).
        """
        stmt = (
            select(
                Claim.id,
                Claim.status,
                Claim.category_main,
                Claim.category_sub,
                Claim.created_at,
                Claim.submitted_at,
                Claim.insurer_comment,
                Claim.created_by_id,
                Claim.created_by_name,
                Claim.approver_id,
                Claim.approver_name,
                CPMForm.cause,
            )
            .outerjoin(CPMForm, CPMForm.claim_id == Claim.id)
            .order_by(Claim.created_at.desc())
        )

        if criteria.user_email:
            stmt = stmt.join(User, User.id == Claim.created_by_id).where(
                User.email == criteria.user_email.strip().lower()
            )
        if criteria.approver_id:
            stmt = stmt.where(Claim.approver_id == criteria.approver_id)
        if criteria.status:
            stmt = stmt.where(Claim.status == criteria.status)
        if criteria.exclude_status:
            stmt = stmt.where(Claim.status != criteria.exclude_status)
        if criteria.category_main:
            stmt = stmt.where(Claim.category_main == criteria.category_main)
        if criteria.category_sub:
            stmt = stmt.where(Claim.category_sub == criteria.category_sub)

        try:
            result = await self.session.execute(stmt)
            return result.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing claims: {e}", exc_info=True)
            raise

    async def add_attachments(
        self, claim_id: UUID, stored: Sequence[tuple[AttachmentType, str, str]]
    ) -> list[Attachment]:
        """Persist attachment rows for already-stored files.

        Args:
            claim_id: Owning claim
            stored: ``(type, file_name, url)`` triples
        """
        attachments = [
            Attachment(claim_id=claim_id, type=kind, file_name=file_name, url=url)
            for kind, file_name, url in stored
        ]
        self.session.add_all(attachments)
        await self.session.flush()
        return attachments

    async def add_status_event(
        self,
        claim_id: UUID,
        from_status: Optional[ClaimStatus],
        to_status: ClaimStatus,
        action: str,
        actor_id: Optional[UUID] = None,
        comment: Optional[str] = None,
    ) -> ClaimStatusEvent:
        event = ClaimStatusEvent(
            claim_id=claim_id,
            from_status=from_status,
            to_status=to_status,
            action=action,
            actor_id=actor_id,
            comment=comment,
        )
        self.session.add(event)
        await self.session.flush()
        return event


class CPMFormRepository(BaseRepository[CPMForm]):
    """Repository for the claimant's CPM form."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, CPMForm)

    async def get_by_claim(self, claim_id: UUID) -> Optional[CPMForm]:
        stmt = select(CPMForm).where(CPMForm.claim_id == claim_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
