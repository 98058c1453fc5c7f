import logging
from datetime import datetime, timezone
from typing import Iterable, List, Literal, Optional

from business.approval import plan_connection_requests
from business.eligibility import can_respond
from business.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailureError,
)
from business.lifecycle import (
    CANCELLED,
    CONFIRMABLE_STATUSES,
    CONFIRMED,
    LifecyclePolicy,
    should_confirm,
)
from business.social_graph import SocialGraph
from database import hangout as hangout_repo
from database import user as user_repo
from database.hangout import Hangout

logger = logging.getLogger(__name__)

HangoutAction = Literal["accept", "reject"]


def _normalize_participants(host_id: str, participant_ids: Iterable[str]) -> List[str]:
    # The host is an implicit member and never stored as a participant.
    return [pid for pid in dict.fromkeys(participant_ids) if pid and pid != host_id]


def create_hangout(
    host_id: str,
    participant_ids: Iterable[str],
    activity_description: str,
    details: Optional[str] = None,
    scheduled_at: Optional[datetime] = None,
) -> Hangout:
    """
    Create a hangout and the approval requests its participants need.

    The host starts out as accepted. The hangout starts as
    ``pending_approval`` if any request was emitted, ``pending`` otherwise.

    Args:
        host_id: The authenticated user creating the hangout
        participant_ids: Invited users; duplicates and the host are dropped
        activity_description: What the hangout is about
        details: Optional free-form details
        scheduled_at: When it happens; defaults to now

    Returns:
        The persisted hangout
    """
    if not activity_description or not activity_description.strip():
        raise ValidationFailureError("Activity description is required")

    host = user_repo.get_user_by_id(host_id)
    if not host:
        raise NotFoundError("Host user not found")

    candidate_ids = _normalize_participants(host_id, participant_ids)
    if not candidate_ids:
        raise ValidationFailureError("A hangout needs at least one participant")

    candidates = user_repo.get_users_by_ids(candidate_ids)
    found_ids = {user.id for user in candidates}
    missing = [pid for pid in candidate_ids if pid not in found_ids]
    if missing:
        raise NotFoundError(f"Participant {missing[0]} not found")

    graph = SocialGraph([host, *candidates])
    plan = plan_connection_requests(host, candidate_ids, graph)

    hangout = hangout_repo.create_hangout(
        host_id=host_id,
        participants=[(pid, degree.value) for pid, degree in plan.participants],
        activity_description=activity_description.strip(),
        details=details,
        scheduled_at=scheduled_at or datetime.now(timezone.utc),
        status=plan.initial_status,
        connection_requests=[
            {
                "requester_id": request.requester_id,
                "requested_id": request.requested_id,
                "approver_id": request.approver_id,
            }
            for request in plan.requests
        ],
    )

    logger.info(
        f"Host {host_id} created hangout {hangout.id} with {len(candidate_ids)} "
        f"participant(s), {len(plan.requests)} approval request(s), status {hangout.status}"
    )
    return hangout


def list_hangouts_for_user(user_id: str) -> List[Hangout]:
    return hangout_repo.list_hangouts_for_member(user_id)


def respond_to_hangout(hangout_id: str, user_id: str, action: HangoutAction) -> Hangout:
    """
    Record an accept or reject, replacing any earlier answer by the same user.

    Eligibility is checked first. After an accept the hangout is confirmed
    if every member has accepted; a later reject leaves it confirmed.
    """
    hangout = hangout_repo.get_hangout_by_id(hangout_id)
    if not hangout:
        raise NotFoundError("Hangout not found")

    if user_id not in hangout.all_members:
        raise ForbiddenError("You are not part of this hangout")

    host = user_repo.get_user_by_id(hangout.host_id)
    if not host:
        raise NotFoundError("Host user not found")

    if not can_respond(user_id, hangout, host):
        raise ForbiddenError("You cannot respond to this hangout right now")

    response = "accepted" if action == "accept" else "rejected"
    updated = hangout_repo.record_response(hangout_id, user_id, response)
    logger.info(f"User {user_id} {response} hangout {hangout_id}")

    if action == "accept" and should_confirm(updated):
        if hangout_repo.transition_status(
            hangout_id, from_statuses=CONFIRMABLE_STATUSES, to_status=CONFIRMED
        ):
            logger.info(f"Hangout {hangout_id} confirmed: every member accepted")
        updated = hangout_repo.get_hangout_by_id(hangout_id)

    return updated


def cancel_hangout(
    hangout_id: str, user_id: str, policy: Optional[LifecyclePolicy] = None
) -> None:
    """Host-only. Outstanding approval requests are rejected with the hangout."""
    policy = policy or LifecyclePolicy()

    hangout = hangout_repo.get_hangout_by_id(hangout_id)
    if not hangout:
        raise NotFoundError("Hangout not found")

    if hangout.host_id != user_id:
        raise ForbiddenError("Only the host can cancel a hangout")

    if hangout.status == CANCELLED:
        raise ConflictError("Hangout is already cancelled")

    allowed = policy.cancellable_statuses()
    if hangout.status not in allowed:
        raise ConflictError(f"A {hangout.status} hangout cannot be cancelled")

    rejected = hangout_repo.cancel_hangout(hangout_id, from_statuses=allowed)
    if rejected is None:
        raise ConflictError("Hangout changed state before it could be cancelled")

    logger.info(
        f"Host {user_id} cancelled hangout {hangout_id}; "
        f"{rejected} pending approval request(s) rejected"
    )
