"""Rehydrate hangouts and connection requests with user summaries for display."""

import logging
from typing import Dict, Iterable, List

from business.eligibility import can_respond
from business.social_graph import ConnectionDegree
from database import user as user_repo
from database.connection_request import ConnectionRequest
from database.hangout import Hangout
from database.user import User
from models.connection_request import ConnectionRequestResponse
from models.hangout import HangoutResponse
from models.user import UserResponse, UserSummary

logger = logging.getLogger(__name__)


def to_user_summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        name=user.name,
        profile_image_url=user.profile_image_url,
    )


def to_user_response(user: User) -> UserResponse:
    return UserResponse(**user.model_dump())


def _load_users(user_ids: Iterable[str]) -> Dict[str, User]:
    return {user.id: user for user in user_repo.get_users_by_ids(user_ids)}


def project_hangouts(hangouts: List[Hangout], viewer_id: str) -> List[HangoutResponse]:
    users = _load_users(
        member_id for hangout in hangouts for member_id in hangout.all_members
    )

    results: List[HangoutResponse] = []
    for hangout in hangouts:
        host = users.get(hangout.host_id)
        if not host:
            logger.warning(f"Host {hangout.host_id} of hangout {hangout.id} not found")

        participants: List[UserSummary] = []
        for participant_id in hangout.participants:
            participant = users.get(participant_id)
            if not participant:
                logger.warning(
                    f"Participant {participant_id} of hangout {hangout.id} not found"
                )
                continue
            participants.append(to_user_summary(participant))

        results.append(
            HangoutResponse(
                id=hangout.id,
                host_id=hangout.host_id,
                host=to_user_summary(host) if host else None,
                participants=participants,
                participant_degrees=hangout.participant_degrees,
                unreachable_participant_ids=[
                    pid
                    for pid, degree in hangout.participant_degrees.items()
                    if degree == ConnectionDegree.UNREACHABLE.value
                ],
                accepted_by=hangout.accepted_by,
                rejected_by=hangout.rejected_by,
                status=hangout.status,
                activity_description=hangout.activity_description,
                details=hangout.details,
                scheduled_at=hangout.scheduled_at,
                created_at=hangout.created_at,
                updated_at=hangout.updated_at,
                can_respond=bool(host) and can_respond(viewer_id, hangout, host),
            )
        )
    return results


def project_hangout(hangout: Hangout, viewer_id: str) -> HangoutResponse:
    return project_hangouts([hangout], viewer_id)[0]


def project_connection_requests(
    requests: List[ConnectionRequest],
) -> List[ConnectionRequestResponse]:
    users = _load_users(
        user_id
        for request in requests
        for user_id in (request.requester_id, request.requested_id)
    )

    results: List[ConnectionRequestResponse] = []
    for request in requests:
        requester = users.get(request.requester_id)
        requested = users.get(request.requested_id)
        results.append(
            ConnectionRequestResponse(
                **request.model_dump(),
                requester=to_user_summary(requester) if requester else None,
                requested=to_user_summary(requested) if requested else None,
            )
        )
    return results
