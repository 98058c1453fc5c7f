"""
Connection Approval Workflow

Decides which invited participants need a mutual friend's approval before
they can deal with a host, routes each request to an approver, and applies
the approver's decision.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from business.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailureError,
)
from business.lifecycle import initial_status
from business.social_graph import ConnectionDegree, SocialGraph
from database import connection_request as connection_request_repo
from database import hangout as hangout_repo
from database.connection_request import ConnectionRequest
from database.hangout import HangoutStatus
from database.user import User

logger = logging.getLogger(__name__)

DECISIONS = ("approved", "rejected")


@dataclass(frozen=True)
class PlannedRequest:
    requester_id: str
    requested_id: str
    approver_id: str


@dataclass
class ApprovalPlan:
    participants: List[Tuple[str, ConnectionDegree]] = field(default_factory=list)
    requests: List[PlannedRequest] = field(default_factory=list)

    @property
    def initial_status(self) -> HangoutStatus:
        return initial_status(len(self.requests))

    @property
    def unreachable_ids(self) -> List[str]:
        return [
            user_id
            for user_id, degree in self.participants
            if degree == ConnectionDegree.UNREACHABLE
        ]


def plan_connection_requests(
    host: User, candidate_ids: Iterable[str], graph: SocialGraph
) -> ApprovalPlan:
    """
    Work out the approval requests a new hangout needs.

    For each candidate:
    1. first-degree friends of the host need nothing
    2. second-degree users the host was approved for before need nothing
    3. otherwise the first mutual friend, in the host's friend-list order,
       becomes the approver of a new pending request
    4. with no mutual friend the candidate is unreachable: still invited,
       no request

    Args:
        host: The hosting user
        candidate_ids: Invited participant ids, already deduplicated
        graph: Social graph holding the host and every candidate

    Returns:
        The per-participant classification and the requests to persist
    """
    plan = ApprovalPlan()

    for candidate_id in candidate_ids:
        degree = graph.classify(host.id, candidate_id)
        plan.participants.append((candidate_id, degree))

        if degree == ConnectionDegree.SECOND_DEGREE:
            approver_id = graph.mutual_friends(host.id, candidate_id)[0]
            plan.requests.append(
                PlannedRequest(
                    requester_id=host.id,
                    requested_id=candidate_id,
                    approver_id=approver_id,
                )
            )
        elif degree == ConnectionDegree.UNREACHABLE:
            # TODO: product has to decide between auto-excluding these
            # participants and an alternative approval route.
            logger.warning(
                f"Participant {candidate_id} shares no mutual friend with host "
                f"{host.id}; no approval path"
            )

    return plan


def release_approval_gate(hangout_id: str) -> bool:
    """
    Move a hangout from pending_approval to pending when nothing is left to approve.

    The pending count is read from the store on every call and the status
    change is conditional, so concurrent resolutions of sibling requests
    cannot both apply it and a cancelled hangout stays cancelled.
    """
    remaining, released = hangout_repo.release_approval_gate(hangout_id)
    _log_gate(hangout_id, remaining, released)
    return released


def _log_gate(hangout_id: str, remaining: int, released: bool) -> None:
    if remaining > 0:
        logger.info(f"Hangout {hangout_id} still waiting on {remaining} approval request(s)")
    elif released:
        logger.info(f"Hangout {hangout_id} cleared all approvals and is now pending")


def resolve_connection_request(
    request_id: str, approver_id: str, decision: str
) -> ConnectionRequest:
    """
    Apply the approver's decision to a pending request.

    Marking the request, granting standing on approval (requester toward
    requested only) and releasing the hangout commit together.
    """
    if decision not in DECISIONS:
        raise ValidationFailureError("Decision must be 'approved' or 'rejected'")

    request = connection_request_repo.get_connection_request_by_id(request_id)
    if not request:
        raise NotFoundError("Connection request not found")
    if request.approver_id != approver_id:
        raise ForbiddenError("Not authorized to handle this request")
    if request.status != "pending":
        raise ConflictError("This request has already been handled")

    outcome = hangout_repo.apply_connection_decision(request_id, decision)
    if outcome is None:
        raise ConflictError("This request has already been handled")
    resolved, remaining, released = outcome

    logger.info(
        f"Connection request {request_id} {decision} by {approver_id} "
        f"(requester {request.requester_id}, requested {request.requested_id})"
    )
    _log_gate(request.hangout_id, remaining, released)
    return resolved


def list_pending_requests_for_approver(approver_id: str) -> List[ConnectionRequest]:
    return connection_request_repo.list_connection_requests(
        approver_id=approver_id, status="pending"
    )
