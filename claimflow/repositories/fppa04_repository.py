"""Repository for FPPA04 settlement forms."""

from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from claimflow.database.models import (
    FPPA04AdjustmentCPM,
    FPPA04Base,
    FPPA04CPM,
    FPPA04ItemCPM,
)
from claimflow.repositories.base_repository import BaseRepository


class FPPA04Repository(BaseRepository[FPPA04Base]):
    """Repository for FPPA04Base and its CPM variant."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, FPPA04Base)

    async def get_by_claim(self, claim_id: UUID, refresh: bool = False) -> Optional[FPPA04Base]:
        """Get the FPPA04 base of a claim with its CPM variant, items and adjustments.

        Args:
            claim_id: Claim ID
            refresh: Overwrite any state already held in the session

        Returns:
            FPPA04Base or None
        """
        variant = selectinload(FPPA04Base.cpm_variant)
        stmt = (
            select(FPPA04Base)
            .where(FPPA04Base.claim_id == claim_id)
            .options(
                variant.selectinload(FPPA04CPM.items),
                variant.selectinload(FPPA04CPM.adjustments),
            )
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_bases(
        self, main_type: Optional[str] = None, sub_type: Optional[str] = None
    ) -> Sequence[Any]:
        """List ``(claim_id, created_at)`` rows for FPPA04 bases, newest first."""
        stmt = select(FPPA04Base.claim_id, FPPA04Base.created_at).order_by(
            FPPA04Base.created_at.desc()
        )
        if main_type:
            stmt = stmt.where(FPPA04Base.main_type == main_type)
        if sub_type:
            stmt = stmt.where(FPPA04Base.sub_type == sub_type)
        result = await self.session.execute(stmt)
        return result.all()

    async def get_item(self, cpm_id: UUID, item_id: UUID) -> Optional[FPPA04ItemCPM]:
        stmt = select(FPPA04ItemCPM).where(
            FPPA04ItemCPM.id == item_id, FPPA04ItemCPM.cpm_id == cpm_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_adjustment(self, cpm_id: UUID, adjustment_id: UUID) -> Optional[FPPA04AdjustmentCPM]:
        stmt = select(FPPA04AdjustmentCPM).where(
            FPPA04AdjustmentCPM.id == adjustment_id, FPPA04AdjustmentCPM.cpm_id == cpm_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
