"""Tests for claim creation, partial updates and listing."""

import io
from uuid import uuid4

import pytest
from fastapi import UploadFile

from claimflow.core.exceptions import NotFoundError
from claimflow.repositories.claim_repository import ClaimFilter
from claimflow.schemas.claims import ClaimCreateRequest, ClaimPatch
from claimflow.schemas.enums import AttachmentType, ClaimStatus
from claimflow.services.claim_service import ClaimService, to_claim_detail


def make_upload(name: str, content: bytes = b"file-bytes") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=name)


def header(approver_id, save_as_draft: bool = False, **overrides) -> ClaimCreateRequest:
    data = {
        "categoryMain": "CAR",
        "categorySub": "CPM",
        "approverId": str(approver_id),
        "saveAsDraft": save_as_draft,
    }
    data.update(overrides)
    return ClaimCreateRequest.model_validate(data)


@pytest.fixture
def claim_service(db_session, storage) -> ClaimService:
    return ClaimService(db_session, storage)


class TestCreateClaim:
    @pytest.mark.asyncio
    async def test_draft_has_no_submission_time(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )

        assert claim.status == ClaimStatus.DRAFT
        assert claim.submitted_at is None
        assert claim.created_by_name == "Somchai Claimant"
        assert claim.approver_name == "Manager Boss"
        assert [e.action for e in claim.status_events] == ["create"]

    @pytest.mark.asyncio
    async def test_submitted_claim_goes_to_insurer(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(actor_for(users["claimant"]), header(users["manager"].id))

        assert claim.status == ClaimStatus.PENDING_INSURER_REVIEW
        assert claim.submitted_at is not None
        event = claim.status_events[0]
        assert event.from_status is None
        assert event.to_status == ClaimStatus.PENDING_INSURER_REVIEW

    @pytest.mark.asyncio
    async def test_unknown_approver(self, claim_service, users, actor_for) -> None:
        with pytest.raises(NotFoundError, match="Approver not found"):
            await claim_service.create_claim(actor_for(users["claimant"]), header(uuid4()))

    @pytest.mark.asyncio
    async def test_detail_lists_status_dates_and_actions(self, claim_service, users, actor_for) -> None:
        claimant = actor_for(users["claimant"])
        claim = await claim_service.create_claim(claimant, header(users["manager"].id, save_as_draft=True))

        detail = to_claim_detail(claim, claimant)
        assert set(detail.status_dates) == {"DRAFT"}
        assert detail.allowed_actions == ["submit"]
        assert to_claim_detail(claim, actor_for(users["insurer"])).allowed_actions == []


class TestUpdateClaim:
    @pytest.mark.asyncio
    async def test_cause_creates_placeholder_cpm_form(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )

        updated = await claim_service.update_claim(claim.id, ClaimPatch(cause="Rear-ended at a light"))

        assert updated.cpm_form is not None
        assert updated.cpm_form.cause == "Rear-ended at a light"
        assert updated.cpm_form.accident_time == "00:00"
        assert updated.cpm_form.location == ""

    @pytest.mark.asyncio
    async def test_cause_only_changes_cause(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )
        await claim_service.update_claim(claim.id, ClaimPatch(cause="first"))
        form_id = (await claim_service.get_claim(claim.id)).cpm_form.id

        updated = await claim_service.update_claim(
            claim.id, ClaimPatch(cause="second", category_sub="OTHER")
        )

        assert updated.cpm_form.id == form_id
        assert updated.cpm_form.cause == "second"
        assert updated.category_sub == "OTHER"
        assert updated.category_main == "CAR"

    @pytest.mark.asyncio
    async def test_status_cannot_be_patched(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )

        patch = ClaimPatch.model_validate({"status": "COMPLETED", "insurerComment": "noted"})
        updated = await claim_service.update_claim(claim.id, patch)

        assert updated.status == ClaimStatus.DRAFT
        assert updated.insurer_comment == "noted"

    @pytest.mark.asyncio
    async def test_new_approver_refreshes_name(self, claim_service, users, actor_for) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )

        updated = await claim_service.update_claim(claim.id, ClaimPatch(approver_id=users["other"].id))
        assert updated.approver_id == users["other"].id
        assert updated.approver_name == "Anong Other"

        with pytest.raises(NotFoundError, match="Approver not found"):
            await claim_service.update_claim(claim.id, ClaimPatch(approver_id=uuid4()))

    @pytest.mark.asyncio
    async def test_uploads_become_typed_attachments(self, claim_service, users, actor_for, storage) -> None:
        claim = await claim_service.create_claim(
            actor_for(users["claimant"]), header(users["manager"].id, save_as_draft=True)
        )
        files = {
            "damageFiles": [make_upload("bumper.jpg"), make_upload("door.jpg")],
            "estimateFiles": [make_upload("quote.pdf")],
            "unrelated": [make_upload("ignored.txt")],
        }

        updated = await claim_service.update_claim(claim.id, ClaimPatch(), files)

        kinds = sorted(a.type.value for a in updated.attachments)
        assert kinds == [
            AttachmentType.DAMAGE_IMAGE.value,
            AttachmentType.DAMAGE_IMAGE.value,
            AttachmentType.ESTIMATE_DOC.value,
        ]
        assert all(a.url.startswith("/uploads/") for a in updated.attachments)
        assert len(list(storage.upload_dir.iterdir())) == 3

    @pytest.mark.asyncio
    async def test_missing_claim(self, claim_service, users) -> None:
        with pytest.raises(NotFoundError, match="Claim not found"):
            await claim_service.update_claim(uuid4(), ClaimPatch(cause="x"))
        with pytest.raises(NotFoundError):
            await claim_service.get_claim(uuid4())


class TestListClaims:
    @pytest.mark.asyncio
    async def test_filters_and_order(self, claim_service, users, actor_for) -> None:
        claimant = actor_for(users["claimant"])
        other = actor_for(users["other"])
        first = await claim_service.create_claim(claimant, header(users["manager"].id, save_as_draft=True))
        second = await claim_service.create_claim(claimant, header(users["other"].id))
        third = await claim_service.create_claim(
            other, header(users["manager"].id, categoryMain="PROPERTY")
        )
        await claim_service.update_claim(second.id, ClaimPatch(cause="hail"))

        everything = await claim_service.list_claims(ClaimFilter())
        assert [c.id for c in everything] == [third.id, second.id, first.id]

        mine = await claim_service.list_claims(ClaimFilter(user_email="SOMCHAI@example.com"))
        assert {c.id for c in mine} == {first.id, second.id}

        by_approver = await claim_service.list_claims(ClaimFilter(approver_id=users["manager"].id))
        assert {c.id for c in by_approver} == {first.id, third.id}

        not_drafts = await claim_service.list_claims(ClaimFilter(exclude_status=ClaimStatus.DRAFT))
        assert {c.id for c in not_drafts} == {second.id, third.id}

        drafts = await claim_service.list_claims(ClaimFilter(status=ClaimStatus.DRAFT))
        assert [c.id for c in drafts] == [first.id]

        property_claims = await claim_service.list_claims(ClaimFilter(category_main="PROPERTY"))
        assert [c.id for c in property_claims] == [third.id]

        with_cause = {c.id: c.cause for c in everything}
        assert with_cause[second.id] == "hail"
        assert with_cause[first.id] is None
