from __future__ import annotations
from enum import Enum

from core.exceptions.errors import ValidationError


class ContractStatus(str, Enum):
    """Contract lifecycle status. Only the approval state machine writes it."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE_CONTRACT = "active_contract"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ContractStatus.DRAFT: "Draft",
    ContractStatus.IN_PROGRESS: "In Progress",
    ContractStatus.PENDING_APPROVAL: "Pending Approval",
    ContractStatus.ACTIVE_CONTRACT: "Active Contract",
}


def normalize_status(value: object) -> ContractStatus:
    """
    Boundary normalization: accepts enum values and display labels
    ("Pending Approval", "pending_approval", "PENDING-APPROVAL", ...).
    Anything else is rejected; the state machine never sees raw strings.
    """
    if isinstance(value, ContractStatus):
        return value
    key = " ".join(str(value or "").strip().lower().replace("_", " ").replace("-", " ").split())
    for status in ContractStatus:
        if key == status.value.replace("_", " "):
            return status
    raise ValidationError(f"Unknown contract status: {value!r}", code="invalid_status")


def status_label(value: object) -> str:
    return normalize_status(value).label
