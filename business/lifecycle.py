"""
Hangout Lifecycle

Status rules for a hangout:

    pending_approval -> pending -> confirmed
            |              |          |
            +--------------+----------+--> cancelled

- pending_approval -> pending once no approval request is left pending
- any open status -> confirmed once host and every participant accepted
- pending_approval | pending -> cancelled by the host; confirmed -> cancelled
  only when the policy allows it

Persistence lives in ``database.hangout``; this module only decides.
"""

from dataclasses import dataclass
from typing import Tuple

from database.hangout import Hangout, HangoutStatus
from utils.constants import ALLOW_CANCEL_CONFIRMED

PENDING_APPROVAL: HangoutStatus = "pending_approval"
PENDING: HangoutStatus = "pending"
CONFIRMED: HangoutStatus = "confirmed"
CANCELLED: HangoutStatus = "cancelled"

CONFIRMABLE_STATUSES: Tuple[HangoutStatus, ...] = (PENDING_APPROVAL, PENDING)


@dataclass(frozen=True)
class LifecyclePolicy:
    allow_cancel_confirmed: bool = ALLOW_CANCEL_CONFIRMED

    def cancellable_statuses(self) -> Tuple[HangoutStatus, ...]:
        if self.allow_cancel_confirmed:
            return (PENDING_APPROVAL, PENDING, CONFIRMED)
        return (PENDING_APPROVAL, PENDING)


def initial_status(request_count: int) -> HangoutStatus:
    return PENDING_APPROVAL if request_count > 0 else PENDING


def should_confirm(hangout: Hangout) -> bool:
    """Everybody, host included, has accepted."""
    if hangout.status not in CONFIRMABLE_STATUSES:
        return False
    return len(hangout.accepted_by) == len(hangout.participants) + 1
