from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from claimflow.api.v1.forms import decode_json_list, parse_model, read_body
from claimflow.core.auth import get_current_user
from claimflow.core.dependencies import get_fppa04_service
from claimflow.schemas.auth import CurrentUser
from claimflow.schemas.fppa04 import (
    FPPA04AdjustmentEnvelope,
    FPPA04AdjustmentIn,
    FPPA04AdjustmentPatch,
    FPPA04AdjustmentResponse,
    FPPA04BaseCreate,
    FPPA04BaseEnvelope,
    FPPA04BaseResponse,
    FPPA04BaseUpdate,
    FPPA04CPMFields,
    FPPA04CPMResponse,
    FPPA04CPMUpsert,
    FPPA04FormResponse,
    FPPA04ItemEnvelope,
    FPPA04ItemIn,
    FPPA04ItemPatch,
    FPPA04ItemResponse,
    FPPA04ListResponse,
    FPPA04VariantEnvelope,
)
from claimflow.services.fppa04_service import FPPA04Service
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])

Fppa04Dep = Annotated[FPPA04Service, Depends(get_fppa04_service)]

# Multipart fields that may be repeated or carry JSON
LIST_FIELDS = ("items", "adjustments", "signatureUrls")


@router.post(
    "",
    response_model=FPPA04BaseEnvelope,
    summary="Ensure FPPA04 base",
    description="Create the FPPA04 base for a claim unless one already exists",
    operation_id="ensure_fppa04_base",
)
async def ensure_base(payload: FPPA04BaseCreate, fppa04_service: Fppa04Dep) -> FPPA04BaseEnvelope:
    base = await fppa04_service.ensure_base(payload)
    return FPPA04BaseEnvelope(base=FPPA04BaseResponse.model_validate(base))


@router.get(
    "",
    response_model=FPPA04ListResponse,
    summary="List FPPA04 forms",
    description="List claims that have an FPPA04 base, optionally filtered by category",
    operation_id="list_fppa04_bases",
)
async def list_bases(
    fppa04_service: Fppa04Dep,
    category_main: Annotated[Optional[str], Query(alias="categoryMain")] = None,
    category_sub: Annotated[Optional[str], Query(alias="categorySub")] = None,
) -> FPPA04ListResponse:
    entries = await fppa04_service.list_bases(category_main, category_sub)
    return FPPA04ListResponse(claims=entries)


@router.get(
    "/{claim_id}",
    response_model=FPPA04FormResponse,
    summary="Get FPPA04 form",
    description="Get the CPM variant (or null) and a summary of the claim",
    operation_id="get_fppa04_form",
)
async def get_form(claim_id: UUID, fppa04_service: Fppa04Dep) -> FPPA04FormResponse:
    return await fppa04_service.get_form(claim_id)


@router.patch(
    "/{claim_id}",
    response_model=FPPA04BaseEnvelope,
    summary="Update FPPA04 base",
    operation_id="update_fppa04_base",
)
async def update_base(
    claim_id: UUID, payload: FPPA04BaseUpdate, fppa04_service: Fppa04Dep
) -> FPPA04BaseEnvelope:
    base = await fppa04_service.update_base(claim_id, payload)
    return FPPA04BaseEnvelope(base=FPPA04BaseResponse.model_validate(base))


@router.post(
    "/{claim_id}/cpm",
    response_model=FPPA04VariantEnvelope,
    summary="Save FPPA04 CPM form",
    description=(
        "Create or fully replace the CPM variant. Accepts JSON, or multipart with "
        "items/adjustments as JSON strings and signatureFiles uploads."
    ),
    operation_id="upsert_fppa04_cpm",
)
async def upsert_cpm(
    request: Request,
    claim_id: UUID,
    fppa04_service: Fppa04Dep,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> FPPA04VariantEnvelope:
    body = await read_body(request, list_fields=LIST_FIELDS)
    data = dict(body.fields)
    data["items"] = decode_json_list(data.get("items"), "items")
    data["adjustments"] = decode_json_list(data.get("adjustments"), "adjustments")
    signature_urls = data.get("signatureUrls") or data.get("signature_urls") or []
    data["signatureUrls"] = [signature_urls] if isinstance(signature_urls, str) else signature_urls
    data.pop("signature_urls", None)

    payload = parse_model(FPPA04CPMUpsert, data)
    LOGGER.info(f"Saving FPPA04 CPM for claim {claim_id}", extra={"user_id": str(current_user.id)})
    variant = await fppa04_service.upsert_fppa04(
        claim_id, payload, signature_files=body.files_for("signatureFiles")
    )
    return FPPA04VariantEnvelope(variant=FPPA04CPMResponse.model_validate(variant))


@router.patch(
    "/{claim_id}/cpm",
    response_model=FPPA04VariantEnvelope,
    summary="Update FPPA04 CPM fields",
    operation_id="update_fppa04_cpm",
)
async def update_cpm(
    claim_id: UUID, payload: FPPA04CPMFields, fppa04_service: Fppa04Dep
) -> FPPA04VariantEnvelope:
    variant = await fppa04_service.update_cpm_variant(claim_id, payload)
    return FPPA04VariantEnvelope(variant=FPPA04CPMResponse.model_validate(variant))


@router.post(
    "/{claim_id}/items",
    response_model=FPPA04ItemEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add FPPA04 item",
    operation_id="add_fppa04_item",
)
async def add_item(claim_id: UUID, payload: FPPA04ItemIn, fppa04_service: Fppa04Dep) -> FPPA04ItemEnvelope:
    item = await fppa04_service.add_item(claim_id, payload)
    return FPPA04ItemEnvelope(item=FPPA04ItemResponse.model_validate(item))


@router.patch(
    "/{claim_id}/items/{item_id}",
    response_model=FPPA04ItemEnvelope,
    summary="Update FPPA04 item",
    operation_id="update_fppa04_item",
)
async def update_item(
    claim_id: UUID, item_id: UUID, payload: FPPA04ItemPatch, fppa04_service: Fppa04Dep
) -> FPPA04ItemEnvelope:
    item = await fppa04_service.update_item(claim_id, item_id, payload)
    return FPPA04ItemEnvelope(item=FPPA04ItemResponse.model_validate(item))


@router.delete(
    "/{claim_id}/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete FPPA04 item",
    operation_id="delete_fppa04_item",
)
async def delete_item(claim_id: UUID, item_id: UUID, fppa04_service: Fppa04Dep) -> Response:
    await fppa04_service.delete_item(claim_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{claim_id}/adjustments",
    response_model=FPPA04AdjustmentEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add FPPA04 adjustment",
    operation_id="add_fppa04_adjustment",
)
async def add_adjustment(
    claim_id: UUID, payload: FPPA04AdjustmentIn, fppa04_service: Fppa04Dep
) -> FPPA04AdjustmentEnvelope:
    adjustment = await fppa04_service.add_adjustment(claim_id, payload)
    return FPPA04AdjustmentEnvelope(adjustment=FPPA04AdjustmentResponse.model_validate(adjustment))


@router.patch(
    "/{claim_id}/adjustments/{adjustment_id}",
    response_model=FPPA04AdjustmentEnvelope,
    summary="Update FPPA04 adjustment",
    operation_id="update_fppa04_adjustment",
)
async def update_adjustment(
    claim_id: UUID, adjustment_id: UUID, payload: FPPA04AdjustmentPatch, fppa04_service: Fppa04Dep
) -> FPPA04AdjustmentEnvelope:
    adjustment = await fppa04_service.update_adjustment(claim_id, adjustment_id, payload)
    return FPPA04AdjustmentEnvelope(adjustment=FPPA04AdjustmentResponse.model_validate(adjustment))


@router.delete(
    "/{claim_id}/adjustments/{adjustment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete FPPA04 adjustment",
    operation_id="delete_fppa04_adjustment",
)
async def delete_adjustment(claim_id: UUID, adjustment_id: UUID, fppa04_service: Fppa04Dep) -> Response:
    await fppa04_service.delete_adjustment(claim_id, adjustment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
