"""Claim service for business logic operations.

This module owns the claim aggregate: creating claims, partial header
updates (including the nested CPM cause), listing and detail views.
"""

from datetime import date
from typing import Mapping, Optional, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import NotFoundError, StorageError, ValidationError
from claimflow.database.models import Claim, CPMForm, utcnow
from claimflow.repositories.claim_repository import ClaimFilter, ClaimRepository, CPMFormRepository
from claimflow.repositories.user_repository import UserRepository
from claimflow.schemas.claims import ClaimCreateRequest, ClaimDetail, ClaimPatch, ClaimSummary
from claimflow.schemas.enums import UPLOAD_FIELDS, AttachmentType, ClaimStatus
from claimflow.services.storage_service import StorageService, StoredFile
from claimflow.utils.logging import get_logger
from claimflow.workflow.transitions import Actor, allowed_actions

LOGGER = get_logger(__name__)


def to_claim_detail(claim: Claim, actor: Optional[Actor] = None) -> ClaimDetail:
    """Build the API view of a loaded claim aggregate.

    ``status_dates`` maps each status to the latest time the claim entered it.
    """
    detail = ClaimDetail.model_validate(claim)
    status_dates = {}
    for event in claim.status_events:
        status_dates[event.to_status.value] = event.created_at
    actions = allowed_actions(claim.status, actor, claim.created_by_id) if actor else []
    return detail.model_copy(update={"status_dates": status_dates, "allowed_actions": actions})


class ClaimService:
    """Service for claim business logic operations."""

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
            storage: Storage for uploaded claim documents
        """
        self.session = db_session
        self.claims = ClaimRepository(db_session)
        self.cpm_forms = CPMFormRepository(db_session)
        self.users = UserRepository(db_session)
        self.storage = storage or StorageService()

    async def create_claim(self, actor: Actor, header: ClaimCreateRequest) -> Claim:
        """Create a claim as a draft or submit it straight away.

        Args:
            actor: The authenticated claimant
            header: Category, approver and draft flag

        Returns:
            The created claim aggregate

        Raises:
            NotFoundError: If the approver or the claimant does not exist
        """
        approver = await self.users.get_by_id(header.approver_id)
        if not approver:
            raise NotFoundError("Approver not found")
        creator = await self.users.get_by_id(actor.id)
        if not creator:
            raise NotFoundError("User not found")

        if header.save_as_draft:
            status, submitted_at, action = ClaimStatus.DRAFT, None, "create"
        else:
            status, submitted_at, action = ClaimStatus.PENDING_INSURER_REVIEW, utcnow(), "submit"

        claim = await self.claims.create(
            category_main=header.category_main,
            category_sub=header.category_sub,
            status=status,
            submitted_at=submitted_at,
            created_by_id=creator.id,
            created_by_name=creator.name,
            approver_id=approver.id,
            approver_name=approver.name,
        )
        await self.claims.add_status_event(
            claim.id, from_status=None, to_status=status, action=action, actor_id=creator.id
        )
        await self.session.commit()

        LOGGER.info(
            f"Claim {claim.id} created with status {status.value}",
            extra={"claim_id": str(claim.id), "created_by": str(creator.id)},
        )
        return await self.claims.get_aggregate(claim.id)

    async def get_claim(self, claim_id: UUID) -> Claim:
        """Get the full claim aggregate.

        Raises:
            NotFoundError: If the claim does not exist
        """
        claim = await self.claims.get_aggregate(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")
        return claim

    async def update_claim(
        self,
        claim_id: UUID,
        patch: ClaimPatch,
        files: Optional[Mapping[str, Sequence[UploadFile]]] = None,
    ) -> Claim:
        """Apply a partial header update and attach uploaded documents.

        A ``cause`` in the patch is written to the claim's CPM form; if the
        claim has no CPM form yet a placeholder one is created around it.

        Args:
            claim_id: Claim ID
            patch: Fields to change; unset fields are left alone
            files: Uploads keyed by form field (damageFiles, estimateFiles, otherFiles)

        Returns:
            The reloaded claim aggregate

        Raises:
            NotFoundError: If the claim or the new approver does not exist
        """
        claim = await self.claims.get_by_id(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")

        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        cause = changes.pop("cause", None)
        approver_id = changes.pop("approver_id", None)

        if approver_id is not None:
            approver = await self.users.get_by_id(approver_id)
            if not approver:
                raise NotFoundError("Approver not found")
            changes["approver_id"] = approver.id
            changes["approver_name"] = approver.name

        if changes:
            await self.claims.update(claim, **changes)

        if cause is not None:
            await self._upsert_cause(claim.id, cause)

        await self.attach_files(claim.id, files)
        await self.session.commit()

        LOGGER.info(f"Claim {claim_id} updated", extra={"fields": sorted(changes), "cause_updated": cause is not None})
        return await self.claims.get_aggregate(claim_id)

    async def list_claims(self, criteria: ClaimFilter) -> list[ClaimSummary]:
        """List claim summaries matching the filter, newest first."""
        rows = await self.claims.list_summaries(criteria)
        return [ClaimSummary.model_validate(dict(row._mapping)) for row in rows]

    async def attach_files(
        self, claim_id: UUID, files: Optional[Mapping[str, Sequence[UploadFile]]]
    ) -> list[StoredFile]:
        """Store uploads and record them as attachments of the matching kind.

        Returns:
            The stored files, so a caller whose transaction fails can discard them
        """
        if not files:
            return []

        stored_files: list[StoredFile] = []
        records: list[tuple[AttachmentType, str, str]] = []
        try:
            for field_name, kind in UPLOAD_FIELDS.items():
                for stored in await self.storage.save_many(files.get(field_name, ())):
                    stored_files.append(stored)
                    records.append((kind, stored.file_name, stored.url))
        except (ValidationError, StorageError):
            await self.storage.discard(stored_files)
            raise

        if records:
            await self.claims.add_attachments(claim_id, records)
        return stored_files

    async def _upsert_cause(self, claim_id: UUID, cause: str) -> CPMForm:
        form = await self.cpm_forms.get_by_claim(claim_id)
        if form:
            form.cause = cause
            await self.session.flush()
            return form
        return await self.cpm_forms.create(
            claim_id=claim_id,
            cause=cause,
            accident_date=date.today(),
            accident_time="00:00",
            location="",
            damage_own_type="",
        )
