"""FPPA04 settlement form service.

The FPPA04 form is filled in by insurer staff. A claim has at most one
FPPA04 base (main/sub type), and the base has at most one CPM variant that
owns ordered damage items and plus/minus adjustments.
"""

from typing import Iterable, Optional, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import NotFoundError, ValidationError
from claimflow.database.models import (
    FPPA04AdjustmentCPM,
    FPPA04Base,
    FPPA04CPM,
    FPPA04ItemCPM,
)
from claimflow.repositories.claim_repository import ClaimRepository
from claimflow.repositories.fppa04_repository import FPPA04Repository
from claimflow.schemas.enums import AdjustmentType
from claimflow.schemas.fppa04 import (
    FPPA04AdjustmentIn,
    FPPA04AdjustmentPatch,
    FPPA04BaseCreate,
    FPPA04BaseUpdate,
    FPPA04ClaimSummary,
    FPPA04CPMFields,
    FPPA04CPMResponse,
    FPPA04CPMUpsert,
    FPPA04FormResponse,
    FPPA04ItemIn,
    FPPA04ItemPatch,
    FPPA04ListEntry,
)
from claimflow.services.storage_service import StorageService
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

SCALAR_FIELDS = set(FPPA04CPMFields.model_fields)


def compute_net_amount(items: Iterable, adjustments: Iterable) -> float:
    """Net payable: item totals minus exceptions, plus ADD and minus DEDUCT adjustments."""
    net = 0.0
    for item in items:
        net += float(item.total or 0) - float(item.exception or 0)
    for adjustment in adjustments:
        amount = float(adjustment.amount or 0)
        net += amount if AdjustmentType(adjustment.type) == AdjustmentType.ADD else -amount
    return round(net, 2)


class FPPA04Service:
    """Service for FPPA04 base and CPM variant operations."""

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
            storage: Storage for uploaded signature files
        """
        self.session = db_session
        self.repository = FPPA04Repository(db_session)
        self.claims = ClaimRepository(db_session)
        self.storage = storage or StorageService()

    async def ensure_base(self, payload: FPPA04BaseCreate) -> FPPA04Base:
        """Create the claim's FPPA04 base unless it already exists.

        An existing base is returned untouched, even if the categories differ.

        Raises:
            NotFoundError: If the claim does not exist
        """
        existing = await self.repository.get_by_claim(payload.claim_id)
        if existing:
            return existing

        if not await self.claims.get_by_id(payload.claim_id):
            raise NotFoundError("Claim not found")

        try:
            base = await self.repository.create(
                claim_id=payload.claim_id,
                main_type=payload.category_main,
                sub_type=payload.category_sub,
            )
            await self.session.commit()
        except IntegrityError:
            # Created concurrently; the other writer's base wins
            await self.session.rollback()
            base = await self.repository.get_by_claim(payload.claim_id)
            if base is None:
                raise
            return base

        LOGGER.info(f"FPPA04 base created for claim {payload.claim_id}")
        return await self.repository.get_by_claim(payload.claim_id, refresh=True)

    async def get_base(self, claim_id: UUID, refresh: bool = False) -> FPPA04Base:
        """Get the claim's FPPA04 base.

        Raises:
            NotFoundError: If the claim has no FPPA04 base
        """
        base = await self.repository.get_by_claim(claim_id, refresh=refresh)
        if not base:
            raise NotFoundError("FPPA-04 base not found")
        return base

    async def get_form(self, claim_id: UUID) -> FPPA04FormResponse:
        """Get the CPM variant (or null) together with a summary of its claim."""
        base = await self.get_base(claim_id)
        claim = await self.claims.get_by_id(claim_id)
        return FPPA04FormResponse(
            form=FPPA04CPMResponse.model_validate(base.cpm_variant) if base.cpm_variant else None,
            claim=FPPA04ClaimSummary.model_validate(claim),
        )

    async def update_base(self, claim_id: UUID, patch: FPPA04BaseUpdate) -> FPPA04Base:
        base = await self.get_base(claim_id)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            await self.repository.update(base, **changes)
            await self.session.commit()
        return await self.get_base(claim_id, refresh=True)

    async def list_bases(
        self, category_main: Optional[str] = None, category_sub: Optional[str] = None
    ) -> list[FPPA04ListEntry]:
        rows = await self.repository.list_bases(category_main, category_sub)
        return [FPPA04ListEntry(id=row.claim_id, created_at=row.created_at) for row in rows]

    async def upsert_fppa04(
        self,
        claim_id: UUID,
        payload: FPPA04CPMUpsert,
        signature_files: Sequence[UploadFile] = (),
    ) -> FPPA04CPM:
        """Create or fully replace the CPM variant of a claim's FPPA04 form.

        Scalars are overwritten, and items and adjustments are replaced
        wholesale in payload order. ``net_amount`` is computed from the lines
        when the payload does not carry one. Uploaded signature files are
        appended to the kept ``signature_urls``. Everything commits together.

        Args:
            claim_id: Claim ID
            payload: Full variant payload
            signature_files: Newly uploaded signature images

        Returns:
            The stored variant with its items and adjustments

        Raises:
            NotFoundError: If the claim or its FPPA04 base does not exist
        """
        base = await self.repository.get_by_claim(claim_id)
        if not base:
            if not await self.claims.get_by_id(claim_id):
                raise NotFoundError("Claim not found")
            raise NotFoundError("FPPA-04 base not found")

        signatures = validate_signature_urls(payload.signature_urls, self.storage.public_prefix)
        stored = await self.storage.save_many(signature_files)
        scalars = payload.model_dump(include=SCALAR_FIELDS)
        if scalars["net_amount"] is None:
            scalars["net_amount"] = compute_net_amount(payload.items, payload.adjustments)
        signatures += [s.url for s in stored]

        items = [
            FPPA04ItemCPM(position=index, **item.model_dump())
            for index, item in enumerate(payload.items)
        ]
        adjustments = [
            FPPA04AdjustmentCPM(position=index, **adjustment.model_dump())
            for index, adjustment in enumerate(payload.adjustments)
        ]

        variant = base.cpm_variant
        if variant is None:
            variant = FPPA04CPM(
                base_id=base.id,
                signature_files=signatures,
                items=items,
                adjustments=adjustments,
                **scalars,
            )
            self.session.add(variant)
        else:
            for key, value in scalars.items():
                setattr(variant, key, value)
            variant.signature_files = signatures
            # Assigning new lists orphans the old rows, which delete-orphan removes
            variant.items = items
            variant.adjustments = adjustments

        await self.session.flush()
        await self.session.commit()
        LOGGER.info(
            f"FPPA04 CPM saved for claim {claim_id}",
            extra={"items": len(items), "adjustments": len(adjustments), "net_amount": scalars["net_amount"]},
        )
        return await self._get_variant(claim_id, refresh=True)

    async def update_cpm_variant(self, claim_id: UUID, patch: FPPA04CPMFields) -> FPPA04CPM:
        """Partially update the variant's scalar fields."""
        variant = await self._get_variant(claim_id)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in changes.items():
            setattr(variant, key, value)
        await self.session.commit()
        return await self._get_variant(claim_id, refresh=True)

    async def add_item(self, claim_id: UUID, item: FPPA04ItemIn) -> FPPA04ItemCPM:
        variant = await self._get_variant(claim_id)
        created = FPPA04ItemCPM(position=self._next_position(variant.items), **item.model_dump())
        variant.items.append(created)
        await self._recompute_and_commit(variant)
        return created

    async def update_item(self, claim_id: UUID, item_id: UUID, patch: FPPA04ItemPatch) -> FPPA04ItemCPM:
        variant = await self._get_variant(claim_id)
        item = await self.repository.get_item(variant.id, item_id)
        if not item:
            raise NotFoundError("FPPA-04 item not found")
        for key, value in patch.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(item, key, value)
        await self._recompute_and_commit(variant)
        return item

    async def delete_item(self, claim_id: UUID, item_id: UUID) -> None:
        variant = await self._get_variant(claim_id)
        item = next((i for i in variant.items if i.id == item_id), None)
        if not item:
            raise NotFoundError("FPPA-04 item not found")
        variant.items.remove(item)
        await self._recompute_and_commit(variant)

    async def add_adjustment(self, claim_id: UUID, adjustment: FPPA04AdjustmentIn) -> FPPA04AdjustmentCPM:
        variant = await self._get_variant(claim_id)
        created = FPPA04AdjustmentCPM(
            position=self._next_position(variant.adjustments), **adjustment.model_dump()
        )
        variant.adjustments.append(created)
        await self._recompute_and_commit(variant)
        return created

    async def update_adjustment(
        self, claim_id: UUID, adjustment_id: UUID, patch: FPPA04AdjustmentPatch
    ) -> FPPA04AdjustmentCPM:
        variant = await self._get_variant(claim_id)
        adjustment = await self.repository.get_adjustment(variant.id, adjustment_id)
        if not adjustment:
            raise NotFoundError("FPPA-04 adjustment not found")
        for key, value in patch.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(adjustment, key, value)
        await self._recompute_and_commit(variant)
        return adjustment

    async def delete_adjustment(self, claim_id: UUID, adjustment_id: UUID) -> None:
        variant = await self._get_variant(claim_id)
        adjustment = next((a for a in variant.adjustments if a.id == adjustment_id), None)
        if not adjustment:
            raise NotFoundError("FPPA-04 adjustment not found")
        variant.adjustments.remove(adjustment)
        await self._recompute_and_commit(variant)

    async def _get_variant(self, claim_id: UUID, refresh: bool = False) -> FPPA04CPM:
        base = await self.get_base(claim_id, refresh=refresh)
        if base.cpm_variant is None:
            raise NotFoundError("FPPA-04 CPM form not found")
        return base.cpm_variant

    @staticmethod
    def _next_position(rows) -> int:
        return max((row.position for row in rows), default=-1) + 1

    async def _recompute_and_commit(self, variant: FPPA04CPM) -> None:
        # Line edits keep the stored net amount in step with the lines
        variant.net_amount = compute_net_amount(variant.items, variant.adjustments)
        await self.session.flush()
        await self.session.commit()


def validate_signature_urls(urls: Iterable[str], public_prefix: str) -> list[str]:
    """Keep only signature URLs that point into our own upload area."""
    kept = []
    for url in urls:
        if not url.startswith(public_prefix + "/"):
            raise ValidationError(f"Signature URL '{url}' is not a stored upload")
        kept.append(url)
    return kept
