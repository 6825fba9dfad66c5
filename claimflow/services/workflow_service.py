"""Workflow service applying status transitions to stored claims."""

from typing import Optional, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.exceptions import NotFoundError, ValidationError
from claimflow.database.models import Claim, utcnow
from claimflow.repositories.claim_repository import ClaimRepository
from claimflow.repositories.fppa04_repository import FPPA04Repository
from claimflow.schemas.enums import AttachmentType, ClaimStatus
from claimflow.services.storage_service import StorageService
from claimflow.utils.logging import get_logger
from claimflow.workflow.transitions import Action, Actor, Transition, find_transition, parse_action, resolve

LOGGER = get_logger(__name__)


class WorkflowService:
    """Moves claims through their lifecycle on behalf of an actor."""

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
            storage: Storage for confirmation documents sent with an action
        """
        self.session = db_session
        self.claims = ClaimRepository(db_session)
        self.fppa04 = FPPA04Repository(db_session)
        self.storage = storage or StorageService()

    async def check(
        self,
        claim: Claim,
        action: Action,
        actor: Actor,
        has_documents: bool = False,
    ) -> tuple[Transition, ClaimStatus]:
        """Find the rule for ``action`` and the status it would lead to, changing nothing.

        Raises:
            InvalidTransitionError: The action does not apply to the current status
            ForbiddenError: The actor may not perform the action
            ValidationError: A precondition of the transition is not met
        """
        rule = find_transition(claim.status, action, actor, claim.created_by_id)
        if rule.requires_settlement_form:
            base = await self.fppa04.get_by_claim(claim.id)
            if base is None or base.cpm_variant is None:
                raise ValidationError("FPPA-04 form must be completed before submitting it for review")
        return rule, resolve(claim.status, action, actor, claim.created_by_id, has_documents=has_documents)

    async def transition(
        self,
        claim: Claim,
        action: Action,
        actor: Actor,
        comment: Optional[str] = None,
        has_documents: bool = False,
    ) -> Claim:
        """Apply one action to a loaded claim without committing.

        Raises:
            InvalidTransitionError: The action does not apply to the current status
            ForbiddenError: The actor may not perform the action
            ValidationError: A precondition of the transition is not met
        """
        previous = claim.status
        rule, target = await self.check(claim, action, actor, has_documents=has_documents)

        claim.status = target
        if rule.stamps_submission:
            claim.submitted_at = utcnow()
        if comment and comment.strip():
            claim.insurer_comment = comment.strip()

        await self.claims.add_status_event(
            claim.id,
            from_status=previous,
            to_status=target,
            action=action.value,
            actor_id=actor.id,
            comment=comment.strip() if comment else None,
        )
        LOGGER.info(
            f"Claim {claim.id} moved {previous.value} -> {target.value}",
            extra={"claim_id": str(claim.id), "action": action.value, "actor_id": str(actor.id)},
        )
        return claim

    async def apply_action(
        self,
        claim_id: UUID,
        actor: Actor,
        action: str,
        comment: Optional[str] = None,
        files: Sequence[UploadFile] = (),
    ) -> Claim:
        """Validate and apply a workflow action, then commit.

        Uploaded files are stored as user confirmation documents.

        Args:
            claim_id: Claim ID
            actor: Authenticated user performing the action
            action: Action name
            comment: Optional comment; overwrites the insurer comment when non-empty
            files: Confirmation documents

        Returns:
            The reloaded claim aggregate

        Raises:
            ValidationError: Unknown action or unmet precondition
            NotFoundError: Claim does not exist
            InvalidTransitionError: Action not valid from the current status
            ForbiddenError: Actor not permitted
        """
        parsed = parse_action(action)
        claim = await self.claims.get_by_id(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")

        uploads = [f for f in files if f.filename]
        # Nothing is written to storage until the action is known to succeed
        await self.check(claim, parsed, actor, has_documents=bool(uploads))

        stored = await self.storage.save_many(uploads)
        try:
            if stored:
                await self.claims.add_attachments(
                    claim.id, [(AttachmentType.USER_CONFIRM_DOC, s.file_name, s.url) for s in stored]
                )
            await self.transition(claim, parsed, actor, comment=comment, has_documents=bool(stored))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            await self.storage.discard(stored)
            raise
        return await self.claims.get_aggregate(claim_id)
