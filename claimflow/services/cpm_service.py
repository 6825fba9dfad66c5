"""CPM form service: the claimant's accident report attached to a claim."""

from typing import Mapping, Optional, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import ConflictError, NotFoundError
from claimflow.database.models import Claim, CPMForm
from claimflow.repositories.claim_repository import ClaimRepository, CPMFormRepository
from claimflow.schemas.cpm import CPMFormCreate, CPMFormFields
from claimflow.schemas.enums import ClaimStatus
from claimflow.services.claim_service import ClaimService
from claimflow.services.storage_service import StorageService
from claimflow.services.workflow_service import WorkflowService
from claimflow.utils.logging import get_logger
from claimflow.workflow.transitions import Action, Actor

LOGGER = get_logger(__name__)

# Action a claimant's final save triggers, by current claim status
SUBMIT_ACTIONS = {
    ClaimStatus.DRAFT: Action.SUBMIT,
    ClaimStatus.AWAITING_EVIDENCE: Action.RESUBMIT,
}


class CPMFormService:
    """Service for creating and updating a claim's CPM form."""

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        self.session = db_session
        self.storage = storage or StorageService()
        self.claims = ClaimRepository(db_session)
        self.cpm_forms = CPMFormRepository(db_session)
        self.claim_service = ClaimService(db_session, self.storage)
        self.workflow = WorkflowService(db_session, self.storage)

    async def attach_cpm_form(
        self,
        claim_id: UUID,
        fields: CPMFormCreate,
        files: Optional[Mapping[str, Sequence[UploadFile]]] = None,
    ) -> CPMForm:
        """Create the claim's CPM form and record any uploaded documents.

        Args:
            claim_id: Claim ID
            fields: Accident report fields
            files: Uploads keyed by form field

        Returns:
            The created CPM form

        Raises:
            NotFoundError: If the claim does not exist
            ConflictError: If the claim already has a CPM form
        """
        claim = await self.claims.get_by_id(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")
        if await self.cpm_forms.get_by_claim(claim_id):
            raise ConflictError("CPM form already exists for this claim")

        try:
            form = await self.cpm_forms.create(claim_id=claim_id, **fields.model_dump(exclude_none=True))
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("CPM form already exists for this claim", original_error=e) from e

        await self.claim_service.attach_files(claim_id, files)
        await self.session.commit()
        LOGGER.info(f"CPM form created for claim {claim_id}", extra={"claim_id": str(claim_id)})
        return form

    async def update_cpm_form(
        self,
        claim_id: UUID,
        actor: Actor,
        fields: CPMFormFields,
        files: Optional[Mapping[str, Sequence[UploadFile]]] = None,
        save_as_draft: bool = True,
    ) -> Claim:
        """Update the claim's CPM form, optionally submitting the claim.

        When ``save_as_draft`` is false a draft claim is submitted and a claim
        awaiting evidence is resubmitted; other statuses are left unchanged.

        Raises:
            NotFoundError: If the claim or its CPM form does not exist
            ForbiddenError: If a submission is attempted by someone other than the claimant
        """
        claim = await self.claims.get_by_id(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")
        form = await self.cpm_forms.get_by_claim(claim_id)
        if not form:
            raise NotFoundError("CPM form not found")

        action = None if save_as_draft else SUBMIT_ACTIONS.get(claim.status)
        if action is not None:
            # A submission the actor may not make is refused before anything is written
            await self.workflow.check(claim, action, actor)

        changes = fields.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            await self.cpm_forms.update(form, **changes)
        stored = await self.claim_service.attach_files(claim_id, files)

        try:
            if action is not None:
                await self.workflow.transition(claim, action, actor)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            await self.storage.discard(stored)
            raise
        return await self.claims.get_aggregate(claim_id)
