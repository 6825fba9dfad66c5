"""Claim status transition rules.

Every status change a claim can go through is listed in ``TRANSITIONS``. The
table is keyed by ``(current status, action)`` and each entry says who may
perform the action and where the claim ends up. ``resolve`` is a pure lookup;
persistence lives in ``claimflow.services.workflow_service``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from claimflow.core.exceptions import ForbiddenError, InvalidTransitionError, ValidationError
from claimflow.schemas.enums import ClaimStatus, UserRole

# Actor requirement meaning "the user who filed the claim", whatever their role.
CREATOR = "CREATOR"


class Action(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_EVIDENCE = "request_evidence"
    RESUBMIT = "resubmit"
    SUBMIT_FORM = "submit_form"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class Actor:
    """The authenticated user attempting an action."""

    id: Union[UUID, str]
    role: UserRole


@dataclass(frozen=True)
class Transition:
    actor: str
    target: ClaimStatus
    # Target used instead when confirmation documents come with the action
    target_with_documents: Optional[ClaimStatus] = None
    requires_documents: bool = False
    requires_settlement_form: bool = False
    stamps_submission: bool = False

    def allows(self, actor: Actor, created_by_id) -> bool:
        if self.actor == CREATOR:
            return str(actor.id) == str(created_by_id)
        return actor.role == self.actor


S = ClaimStatus
INSURANCE = UserRole.INSURANCE.value
MANAGER = UserRole.MANAGER.value

TRANSITIONS: dict[tuple[ClaimStatus, Action], tuple[Transition, ...]] = {
    (S.DRAFT, Action.SUBMIT): (
        Transition(CREATOR, S.PENDING_INSURER_REVIEW, stamps_submission=True),
    ),
    (S.PENDING_INSURER_REVIEW, Action.APPROVE): (Transition(INSURANCE, S.PENDING_INSURER_FORM),),
    (S.PENDING_INSURER_REVIEW, Action.REJECT): (Transition(INSURANCE, S.REJECTED),),
    (S.PENDING_INSURER_REVIEW, Action.REQUEST_EVIDENCE): (Transition(INSURANCE, S.AWAITING_EVIDENCE),),
    (S.AWAITING_EVIDENCE, Action.RESUBMIT): (Transition(CREATOR, S.PENDING_INSURER_REVIEW),),
    (S.PENDING_INSURER_FORM, Action.SUBMIT_FORM): (
        Transition(INSURANCE, S.PENDING_MANAGER_REVIEW, requires_settlement_form=True),
    ),
    (S.PENDING_MANAGER_REVIEW, Action.APPROVE): (Transition(MANAGER, S.PENDING_USER_CONFIRM),),
    (S.PENDING_MANAGER_REVIEW, Action.REJECT): (Transition(MANAGER, S.PENDING_INSURER_REVIEW),),
    (S.PENDING_USER_CONFIRM, Action.CONFIRM): (
        Transition(CREATOR, S.AWAITING_SIGNATURES, target_with_documents=S.COMPLETED),
    ),
    (S.PENDING_USER_CONFIRM, Action.REJECT): (Transition(CREATOR, S.PENDING_INSURER_REVIEW),),
    (S.AWAITING_SIGNATURES, Action.CONFIRM): (
        Transition(CREATOR, S.COMPLETED, requires_documents=True),
    ),
}



def _role_only_actions() -> dict[Action, frozenset[str]]:
    """Actions no claimant can take as creator, mapped to every role that may ever take them."""
    roles: dict[Action, set[str]] = {}
    creator_actions: set[Action] = set()
    for (_, action), rules in TRANSITIONS.items():
        for rule in rules:
            if rule.actor == CREATOR:
                creator_actions.add(action)
            else:
                roles.setdefault(action, set()).add(rule.actor)
    return {action: frozenset(names) for action, names in roles.items() if action not in creator_actions}


# approve, request_evidence and submit_form
ROLE_ONLY_ACTIONS = _role_only_actions()


def parse_action(action: str) -> Action:
    """Normalise a client-supplied action name.

    Raises:
        ValidationError: If the action is not part of the vocabulary
    """
    try:
        return Action((action or "").strip().lower())
    except ValueError:
        raise ValidationError("Unknown action") from None


def find_transition(
    status: ClaimStatus, action: Union[Action, str], actor: Actor, created_by_id
) -> Transition:
    """Find the rule that lets ``actor`` perform ``action`` on a claim in ``status``.

    A role that can never take the action is refused whatever the claim's status.

    Raises:
        ValidationError: Unknown action
        InvalidTransitionError: The action does not apply to the current status
        ForbiddenError: The actor's role never takes this action, or the action
            applies but not for this actor
    """
    if not isinstance(action, Action):
        action = parse_action(action)

    roles = ROLE_ONLY_ACTIONS.get(action)
    if roles is not None and actor.role not in roles:
        raise ForbiddenError("Forbidden")

    rules = TRANSITIONS.get((ClaimStatus(status), action))
    if not rules:
        raise InvalidTransitionError(
            f"Action '{action.value}' is not allowed while claim is {ClaimStatus(status).value}"
        )

    for rule in rules:
        if rule.allows(actor, created_by_id):
            return rule
    raise ForbiddenError("Forbidden")


def resolve(
    status: ClaimStatus,
    action: Union[Action, str],
    actor: Actor,
    created_by_id,
    has_documents: bool = False,
) -> ClaimStatus:
    """Return the status the claim moves to, or raise if the action is not permitted."""
    rule = find_transition(status, action, actor, created_by_id)
    if rule.requires_documents and not has_documents:
        raise ValidationError("Confirmation documents are required")
    if has_documents and rule.target_with_documents is not None:
        return rule.target_with_documents
    return rule.target


def allowed_actions(status: ClaimStatus, actor: Actor, created_by_id) -> list[str]:
    """List the actions ``actor`` may take on a claim in ``status`` right now."""
    status = ClaimStatus(status)
    return [
        action.value
        for (from_status, action), rules in TRANSITIONS.items()
        if from_status == status and any(rule.allows(actor, created_by_id) for rule in rules)
    ]
