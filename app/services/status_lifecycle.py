"""
Single authority for e-waste request status changes.

Every caller (the company review flow, the per-card action flags, the history
edit guard) goes through this module instead of re-implementing the rules.
Nothing here touches the database.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from app.db.schema import RequestStatus


NOTIFYING_STATUSES = (
    RequestStatus.APPROVED,
    RequestStatus.REJECTED,
    RequestStatus.ASSIGNED,
)

STATUS_COLORS = {
    RequestStatus.PENDING: "#ffa500",
    RequestStatus.APPROVED: "#4caf50",
    RequestStatus.REJECTED: "#f44336",
    RequestStatus.ASSIGNED: "#2196f3",
}
UNKNOWN_STATUS_COLOR = "#999"

MISSING_AGENT_MESSAGE = "Please fill in both Agent Name and Phone"


class TransitionError(ValueError):
    """Raised when a requested status change is not allowed."""


@dataclass(frozen=True)
class TransitionPlan:
    """The field changes to apply, together, in a single store write."""
    status: RequestStatus
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReviewActions:
    can_approve: bool
    can_reject: bool
    can_assign: bool


def effective_status(status: Union[RequestStatus, str, None]) -> RequestStatus:
    """Absent or unrecognised statuses are treated as pending."""
    if isinstance(status, RequestStatus):
        return status
    try:
        return RequestStatus(status)
    except ValueError:
        return RequestStatus.PENDING


def plan_transition(
    current: Union[RequestStatus, str, None],
    target: Union[RequestStatus, str],
    agent_name: Optional[str] = None,
    agent_phone: Optional[str] = None,
) -> TransitionPlan:
    """
    Validates a status change and returns the writes it requires.

    - approved / rejected: always permitted, whatever the current status.
      Agent data is cleared so it only exists on assigned requests.
    - assigned: both agent name and phone are required.
    - pending: never a target; no code path moves a request back.
    """
    try:
        target = RequestStatus(target)
    except ValueError:
        raise TransitionError(f"Unknown status '{target}'.")

    if target == RequestStatus.PENDING:
        raise TransitionError(
            f"A {effective_status(current).value} request cannot be moved back to pending.")

    if target == RequestStatus.ASSIGNED:
        name = (agent_name or "").strip()
        phone = (agent_phone or "").strip()
        if not name or not phone:
            raise TransitionError(MISSING_AGENT_MESSAGE)
        return TransitionPlan(
            status=target,
            changes={"status": target, "agent_name": name, "agent_phone": phone},
        )

    return TransitionPlan(
        status=target,
        changes={"status": target, "agent_name": None, "agent_phone": None},
    )


def review_actions(status: Union[RequestStatus, str, None]) -> ReviewActions:
    # Presentation policy only; plan_transition does not consult it.
    status = effective_status(status)
    return ReviewActions(
        can_approve=status != RequestStatus.APPROVED,
        can_reject=status != RequestStatus.REJECTED,
        can_assign=status != RequestStatus.REJECTED,
    )


def can_edit(status: Union[RequestStatus, str, None]) -> bool:
    return effective_status(status) != RequestStatus.APPROVED


def status_label(status: Union[RequestStatus, str, None]) -> str:
    return effective_status(status).value.upper()


def status_class(status: Union[RequestStatus, str, None]) -> str:
    return f"status-{effective_status(status).value}"


def status_color(status: Union[RequestStatus, str, None]) -> str:
    if status is None:
        return STATUS_COLORS[RequestStatus.PENDING]
    try:
        return STATUS_COLORS[RequestStatus(status)]
    except ValueError:
        return UNKNOWN_STATUS_COLOR
