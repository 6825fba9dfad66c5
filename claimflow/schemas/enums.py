"""Enumerations shared by the models, schemas and workflow rules."""

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    MANAGER = "MANAGER"
    INSURANCE = "INSURANCE"


class ClaimStatus(str, Enum):
    """Lifecycle status of a claim."""

    DRAFT = "DRAFT"
    PENDING_APPROVER_REVIEW = "PENDING_APPROVER_REVIEW"
    PENDING_INSURER_REVIEW = "PENDING_INSURER_REVIEW"
    PENDING_INSURER_FORM = "PENDING_INSURER_FORM"
    AWAITING_EVIDENCE = "AWAITING_EVIDENCE"
    PENDING_MANAGER_REVIEW = "PENDING_MANAGER_REVIEW"
    PENDING_USER_CONFIRM = "PENDING_USER_CONFIRM"
    AWAITING_SIGNATURES = "AWAITING_SIGNATURES"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class AttachmentType(str, Enum):
    DAMAGE_IMAGE = "DAMAGE_IMAGE"
    ESTIMATE_DOC = "ESTIMATE_DOC"
    OTHER_DOCUMENT = "OTHER_DOCUMENT"
    USER_CONFIRM_DOC = "USER_CONFIRM_DOC"


class AdjustmentType(str, Enum):
    """Direction of an FPPA04 adjustment line.

    The form UI labels these in Thai, so both spellings are accepted on input.
    """

    ADD = "ADD"
    DEDUCT = "DEDUCT"

    @classmethod
    def _missing_(cls, value):
        aliases = {"บวก": cls.ADD, "หัก": cls.DEDUCT, "add": cls.ADD, "deduct": cls.DEDUCT}
        if isinstance(value, str):
            return aliases.get(value.strip()) or aliases.get(value.strip().lower())
        return None


# Multipart field name -> attachment kind, as sent by the claim forms.
UPLOAD_FIELDS = {
    "damageFiles": AttachmentType.DAMAGE_IMAGE,
    "estimateFiles": AttachmentType.ESTIMATE_DOC,
    "otherFiles": AttachmentType.OTHER_DOCUMENT,
}
