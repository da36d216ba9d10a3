"""
Approval pipeline for loan applications.

Pure decision logic: given a loan's current status, an action and the acting
employee, compute the next status, which approver slot to stamp and whether
the transition must be posted to the ledger. Nothing here touches storage or
the network.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from models.enums import LoanAction, LoanStatus
from services.errors import TerminalStateError, ValidationError

PIPELINE: tuple[LoanStatus, ...] = (
    LoanStatus.PENDING_STAFF_APPROVAL,
    LoanStatus.PENDING_MANAGER_APPROVAL,
    LoanStatus.PENDING_BENDAHARA_APPROVAL,
    LoanStatus.PENDING_KETUA_APPROVAL,
    LoanStatus.APPROVED,
)

INITIAL_STATUS = PIPELINE[0]

TERMINAL_STATUSES: frozenset[LoanStatus] = frozenset({LoanStatus.APPROVED, LoanStatus.REJECTED})

NEXT_STATUS: dict[LoanStatus, LoanStatus] = {
    LoanStatus.PENDING_STAFF_APPROVAL: LoanStatus.PENDING_MANAGER_APPROVAL,
    LoanStatus.PENDING_MANAGER_APPROVAL: LoanStatus.PENDING_BENDAHARA_APPROVAL,
    LoanStatus.PENDING_BENDAHARA_APPROVAL: LoanStatus.PENDING_KETUA_APPROVAL,
    LoanStatus.PENDING_KETUA_APPROVAL: LoanStatus.APPROVED,
}

# Destination status -> approver slot stamped by the approval that lands there
APPROVER_SLOT: dict[LoanStatus, int] = {
    status: position for position, status in enumerate(PIPELINE) if position > 0
}

APPROVER_SLOT_FIELDS: dict[int, str] = {n: f"approver_level_{n}_id" for n in range(1, 5)}


@dataclass(frozen=True)
class Transition:
    from_status: LoanStatus
    status: LoanStatus
    approver_slot: Optional[int] = None
    approver_id: Optional[int] = None
    rejection_reason: Optional[str] = None

    @property
    def posts_to_ledger(self) -> bool:
        return self.status is LoanStatus.APPROVED

    def values(self) -> dict[str, Any]:
        """Column values this transition writes."""
        out: dict[str, Any] = {"status": self.status}
        if self.approver_slot is not None:
            out[APPROVER_SLOT_FIELDS[self.approver_slot]] = self.approver_id
        if self.rejection_reason is not None:
            out["rejection_reason"] = self.rejection_reason
        return out

    def preconditions(self) -> dict[str, Any]:
        """Column values the record must still hold for this transition to be written."""
        out: dict[str, Any] = {"status": self.from_status}
        if self.approver_slot is not None:
            out[APPROVER_SLOT_FIELDS[self.approver_slot]] = None
        return out


def is_terminal(status: LoanStatus) -> bool:
    return LoanStatus(status) in TERMINAL_STATUSES


def apply_action(
    current_status: LoanStatus | str,
    action: LoanAction | str,
    actor_id: int,
    rejection_reason: Optional[str] = None,
) -> Transition:
    """
    Compute the transition for `action` taken by `actor_id` on a loan in `current_status`.

    Raises TerminalStateError for APPROVED/REJECTED loans and ValidationError for an
    unknown action, a reject without a reason, or a reason given with approve.
    """
    current = LoanStatus(current_status)
    try:
        action = LoanAction(action)
    except ValueError:
        raise ValidationError(f"Invalid action: {action!r}") from None

    if is_terminal(current):
        raise TerminalStateError(f"Application is already in a final state ({current.value}).")

    if action is LoanAction.APPROVE:
        if rejection_reason:
            raise ValidationError("A reason can only be given when rejecting.")
        successor = NEXT_STATUS[current]
        return Transition(
            from_status=current,
            status=successor,
            approver_slot=APPROVER_SLOT[successor],
            approver_id=actor_id,
        )

    reason = (rejection_reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required.")
    return Transition(from_status=current, status=LoanStatus.REJECTED, rejection_reason=reason)
