from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from claimflow.api.v1.forms import parse_model, read_body
from claimflow.core.auth import get_current_actor, require_manager
from claimflow.core.dependencies import get_claim_service, get_cpm_service, get_workflow_service
from claimflow.core.exceptions import ValidationError
from claimflow.repositories.claim_repository import ClaimFilter
from claimflow.schemas.auth import CurrentUser
from claimflow.schemas.claims import (
    ClaimActionRequest,
    ClaimCreateRequest,
    ClaimListResponse,
    ClaimPatch,
    ClaimResponse,
)
from claimflow.schemas.cpm import CPMFormCreate, CPMFormCreatedResponse, CPMFormFields, CPMFormResponse
from claimflow.schemas.enums import ClaimStatus
from claimflow.services.claim_service import ClaimService, to_claim_detail
from claimflow.services.cpm_service import CPMFormService
from claimflow.services.workflow_service import WorkflowService
from claimflow.utils.logging import get_logger
from claimflow.workflow.transitions import Action, Actor

LOGGER = get_logger(__name__)

router = APIRouter()

USER_CONFIRM_ACTIONS = {Action.CONFIRM.value, Action.REJECT.value}
MANAGER_ACTIONS = {Action.APPROVE.value, Action.REJECT.value}

# The confirmation form uploads under confirmationFiles; the send-back form uses files
USER_CONFIRM_FILE_FIELDS = ("confirmationFiles", "files")


def _truthy(value) -> bool:
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


@router.get(
    "",
    response_model=ClaimListResponse,
    summary="List claims",
    description="List claim summaries, newest first, with optional filters",
    operation_id="list_claims",
)
async def list_claims(
    claim_service: Annotated[ClaimService, Depends(get_claim_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    user_email: Annotated[Optional[str], Query(alias="userEmail")] = None,
    approver_id: Annotated[Optional[UUID], Query(alias="approverId")] = None,
    claim_status: Annotated[Optional[ClaimStatus], Query(alias="status")] = None,
    exclude_status: Annotated[Optional[ClaimStatus], Query(alias="excludeStatus")] = None,
    category_main: Annotated[Optional[str], Query(alias="categoryMain")] = None,
    category_sub: Annotated[Optional[str], Query(alias="categorySub")] = None,
) -> ClaimListResponse:
    """List claims matching every supplied filter."""
    criteria = ClaimFilter(
        user_email=user_email,
        approver_id=approver_id,
        status=claim_status,
        exclude_status=exclude_status,
        category_main=category_main,
        category_sub=category_sub,
    )
    claims = await claim_service.list_claims(criteria)
    return ClaimListResponse(claims=claims)


@router.post(
    "",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a claim",
    description="Create a claim as a draft, or submit it for insurer review",
    operation_id="create_claim",
)
async def create_claim(
    payload: ClaimCreateRequest,
    claim_service: Annotated[ClaimService, Depends(get_claim_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    claim = await claim_service.create_claim(actor, payload)
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.get(
    "/{claim_id}",
    response_model=ClaimResponse,
    summary="Get a claim",
    description="Get the full claim with attachments, sub-forms and timeline",
    operation_id="get_claim",
)
async def get_claim(
    claim_id: UUID,
    claim_service: Annotated[ClaimService, Depends(get_claim_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    claim = await claim_service.get_claim(claim_id)
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.put(
    "/{claim_id}",
    response_model=ClaimResponse,
    summary="Update a claim",
    description="Partially update claim header fields and attach documents (multipart or JSON)",
    operation_id="update_claim",
)
async def update_claim(
    request: Request,
    claim_id: UUID,
    claim_service: Annotated[ClaimService, Depends(get_claim_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    """Update a claim.

    ``status`` in the body is ignored; statuses change only through the
    action endpoints.
    """
    body = await read_body(request)
    patch = parse_model(ClaimPatch, body.fields)
    claim = await claim_service.update_claim(claim_id, patch, body.files)
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.post(
    "/{claim_id}/action",
    response_model=ClaimResponse,
    summary="Apply a workflow action",
    description="Approve, reject, request evidence, submit or resubmit a claim",
    operation_id="apply_claim_action",
)
async def claim_action(
    claim_id: UUID,
    payload: ClaimActionRequest,
    workflow_service: Annotated[WorkflowService, Depends(get_workflow_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    LOGGER.info(f"Action '{payload.action}' requested on claim {claim_id} by {actor.id}")
    claim = await workflow_service.apply_action(claim_id, actor, payload.action, payload.comment)
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.post(
    "/{claim_id}/manager",
    response_model=ClaimResponse,
    summary="Apply a manager decision",
    description="Manager approval or rejection of the insurer's settlement",
    operation_id="apply_manager_action",
)
async def manager_action(
    claim_id: UUID,
    payload: ClaimActionRequest,
    manager: Annotated[CurrentUser, Depends(require_manager)],
    workflow_service: Annotated[WorkflowService, Depends(get_workflow_service)],
) -> ClaimResponse:
    if (payload.action or "").strip().lower() not in MANAGER_ACTIONS:
        raise ValidationError("Invalid action")
    actor = Actor(id=manager.id, role=manager.role)
    claim = await workflow_service.apply_action(claim_id, actor, payload.action, payload.comment)
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.post(
    "/{claim_id}/userconfirm",
    response_model=ClaimResponse,
    summary="Claimant confirmation",
    description="Confirm the settlement (optionally with signed documents) or send it back",
    operation_id="apply_user_confirmation",
)
async def user_confirm(
    request: Request,
    claim_id: UUID,
    workflow_service: Annotated[WorkflowService, Depends(get_workflow_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    body = await read_body(request)
    action = str(body.fields.get("action") or "").strip().lower()
    if action not in USER_CONFIRM_ACTIONS:
        raise ValidationError("Unknown action")
    claim = await workflow_service.apply_action(
        claim_id,
        actor,
        action,
        comment=body.fields.get("comment"),
        files=body.files_for(*USER_CONFIRM_FILE_FIELDS),
    )
    return ClaimResponse(claim=to_claim_detail(claim, actor))


@router.post(
    "/{claim_id}/cpm",
    response_model=CPMFormCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach the CPM form",
    description="Create the claim's CPM accident form and upload its documents",
    operation_id="create_cpm_form",
)
async def create_cpm_form(
    request: Request,
    claim_id: UUID,
    cpm_service: Annotated[CPMFormService, Depends(get_cpm_service)],
) -> CPMFormCreatedResponse:
    body = await read_body(request)
    fields = parse_model(CPMFormCreate, body.fields)
    form = await cpm_service.attach_cpm_form(claim_id, fields, body.files)
    return CPMFormCreatedResponse(cpm_form=CPMFormResponse.model_validate(form))


@router.put(
    "/{claim_id}/cpm",
    response_model=ClaimResponse,
    summary="Update the CPM form",
    description="Update the CPM form; with saveAsDraft=false the claim is (re)submitted",
    operation_id="update_cpm_form",
)
async def update_cpm_form(
    request: Request,
    claim_id: UUID,
    cpm_service: Annotated[CPMFormService, Depends(get_cpm_service)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> ClaimResponse:
    body = await read_body(request)
    save_as_draft = _truthy(body.fields.pop("saveAsDraft", "true"))
    fields = parse_model(CPMFormFields, body.fields)
    claim = await cpm_service.update_cpm_form(
        claim_id, actor, fields, body.files, save_as_draft=save_as_draft
    )
    return ClaimResponse(claim=to_claim_detail(claim, actor))
