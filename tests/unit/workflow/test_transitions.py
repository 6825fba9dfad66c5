"""Tests for the claim status transition table."""

from uuid import uuid4

import pytest

from claimflow.core.exceptions import ForbiddenError, InvalidTransitionError, ValidationError
from claimflow.schemas.enums import ClaimStatus, UserRole
from claimflow.workflow.transitions import (
    ROLE_ONLY_ACTIONS,
    TRANSITIONS,
    Action,
    Actor,
    allowed_actions,
    parse_action,
    resolve,
)

CREATOR_ID = uuid4()
S = ClaimStatus


@pytest.fixture
def creator() -> Actor:
    return Actor(id=CREATOR_ID, role=UserRole.USER)


@pytest.fixture
def stranger() -> Actor:
    return Actor(id=uuid4(), role=UserRole.USER)


@pytest.fixture
def insurer() -> Actor:
    return Actor(id=uuid4(), role=UserRole.INSURANCE)


@pytest.fixture
def manager() -> Actor:
    return Actor(id=uuid4(), role=UserRole.MANAGER)


class TestResolve:
    """Each permitted transition lands on its target status."""

    @pytest.mark.parametrize(
        "status,action,who,expected",
        [
            (S.DRAFT, "submit", "creator", S.PENDING_INSURER_REVIEW),
            (S.PENDING_INSURER_REVIEW, "approve", "insurer", S.PENDING_INSURER_FORM),
            (S.PENDING_INSURER_REVIEW, "reject", "insurer", S.REJECTED),
            (S.PENDING_INSURER_REVIEW, "request_evidence", "insurer", S.AWAITING_EVIDENCE),
            (S.AWAITING_EVIDENCE, "resubmit", "creator", S.PENDING_INSURER_REVIEW),
            (S.PENDING_INSURER_FORM, "submit_form", "insurer", S.PENDING_MANAGER_REVIEW),
            (S.PENDING_MANAGER_REVIEW, "approve", "manager", S.PENDING_USER_CONFIRM),
            (S.PENDING_MANAGER_REVIEW, "reject", "manager", S.PENDING_INSURER_REVIEW),
            (S.PENDING_USER_CONFIRM, "confirm", "creator", S.AWAITING_SIGNATURES),
            (S.PENDING_USER_CONFIRM, "reject", "creator", S.PENDING_INSURER_REVIEW),
        ],
    )
    def test_transition_targets(self, request, status, action, who, expected) -> None:
        actor = request.getfixturevalue(who)
        assert resolve(status, action, actor, CREATOR_ID) == expected

    def test_confirm_with_documents_completes(self, creator: Actor) -> None:
        result = resolve(S.PENDING_USER_CONFIRM, "confirm", creator, CREATOR_ID, has_documents=True)
        assert result == S.COMPLETED

    def test_awaiting_signatures_needs_documents(self, creator: Actor) -> None:
        with pytest.raises(ValidationError):
            resolve(S.AWAITING_SIGNATURES, "confirm", creator, CREATOR_ID)

        assert (
            resolve(S.AWAITING_SIGNATURES, "confirm", creator, CREATOR_ID, has_documents=True)
            == S.COMPLETED
        )

    def test_action_names_are_normalised(self, insurer: Actor) -> None:
        assert resolve(S.PENDING_INSURER_REVIEW, "  APPROVE ", insurer, CREATOR_ID) == S.PENDING_INSURER_FORM

    def test_creator_relation_ignores_role(self) -> None:
        # An insurer who filed a claim still acts as its creator
        insurer_claimant = Actor(id=CREATOR_ID, role=UserRole.INSURANCE)
        assert resolve(S.DRAFT, Action.SUBMIT, insurer_claimant, CREATOR_ID) == S.PENDING_INSURER_REVIEW


class TestRejections:
    """Unknown actions, inapplicable actions and wrong actors fail distinctly."""

    def test_unknown_action(self, insurer: Actor) -> None:
        with pytest.raises(ValidationError, match="Unknown action"):
            resolve(S.PENDING_INSURER_REVIEW, "escalate", insurer, CREATOR_ID)

    def test_unknown_action_checked_before_status(self, insurer: Actor) -> None:
        with pytest.raises(ValidationError):
            resolve(S.COMPLETED, "escalate", insurer, CREATOR_ID)

    @pytest.mark.parametrize("status", [S.COMPLETED, S.REJECTED, S.PENDING_APPROVER_REVIEW])
    def test_terminal_and_unused_statuses_accept_nothing(self, status, insurer: Actor) -> None:
        with pytest.raises(InvalidTransitionError):
            resolve(status, "approve", insurer, CREATOR_ID)

    def test_action_not_valid_from_status(self, creator: Actor) -> None:
        with pytest.raises(InvalidTransitionError):
            resolve(S.DRAFT, "confirm", creator, CREATOR_ID)

    def test_claimant_cannot_approve(self, creator: Actor) -> None:
        with pytest.raises(ForbiddenError, match="Forbidden"):
            resolve(S.PENDING_INSURER_REVIEW, "approve", creator, CREATOR_ID)

    def test_insurer_cannot_do_manager_approval(self, insurer: Actor) -> None:
        with pytest.raises(ForbiddenError):
            resolve(S.PENDING_MANAGER_REVIEW, "approve", insurer, CREATOR_ID)

    def test_only_the_creator_submits(self, stranger: Actor, manager: Actor) -> None:
        with pytest.raises(ForbiddenError):
            resolve(S.DRAFT, "submit", stranger, CREATOR_ID)
        with pytest.raises(ForbiddenError):
            resolve(S.DRAFT, "submit", manager, CREATOR_ID)

    @pytest.mark.parametrize("action", ["approve", "request_evidence", "submit_form"])
    @pytest.mark.parametrize("status", [S.DRAFT, S.PENDING_INSURER_FORM, S.COMPLETED])
    def test_roles_that_never_act_are_forbidden_in_any_status(self, status, action, creator: Actor) -> None:
        with pytest.raises(ForbiddenError, match="Forbidden"):
            resolve(status, action, creator, CREATOR_ID)

    def test_role_that_acts_elsewhere_still_gets_conflict(self, insurer: Actor, manager: Actor) -> None:
        with pytest.raises(InvalidTransitionError):
            resolve(S.PENDING_INSURER_FORM, "approve", insurer, CREATOR_ID)
        with pytest.raises(InvalidTransitionError):
            resolve(S.DRAFT, "approve", manager, CREATOR_ID)

    def test_role_only_actions(self) -> None:
        assert ROLE_ONLY_ACTIONS == {
            Action.APPROVE: frozenset({"INSURANCE", "MANAGER"}),
            Action.REQUEST_EVIDENCE: frozenset({"INSURANCE"}),
            Action.SUBMIT_FORM: frozenset({"INSURANCE"}),
        }

    def test_invalid_transition_is_a_conflict(self) -> None:
        assert InvalidTransitionError.status_code == 409
        assert ForbiddenError.status_code == 403
        assert ValidationError.status_code == 400


class TestAllowedActions:
    def test_insurer_review_actions(self, insurer: Actor) -> None:
        assert sorted(allowed_actions(S.PENDING_INSURER_REVIEW, insurer, CREATOR_ID)) == [
            "approve",
            "reject",
            "request_evidence",
        ]

    def test_creator_sees_nothing_during_insurer_review(self, creator: Actor) -> None:
        assert allowed_actions(S.PENDING_INSURER_REVIEW, creator, CREATOR_ID) == []

    def test_creator_confirmation_actions(self, creator: Actor, stranger: Actor) -> None:
        assert sorted(allowed_actions(S.PENDING_USER_CONFIRM, creator, CREATOR_ID)) == ["confirm", "reject"]
        assert allowed_actions(S.PENDING_USER_CONFIRM, stranger, CREATOR_ID) == []

    def test_every_table_entry_names_a_known_status(self) -> None:
        for (status, action), rules in TRANSITIONS.items():
            assert isinstance(status, ClaimStatus)
            assert isinstance(action, Action)
            assert rules


def test_parse_action_rejects_empty() -> None:
    with pytest.raises(ValidationError):
        parse_action("")
    assert parse_action("Request_Evidence") is Action.REQUEST_EVIDENCE
