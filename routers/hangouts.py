import logging

from fastapi import APIRouter, Depends, Response, status

from business import hangout as hangout_service
from business.projection import project_hangout, project_hangouts
from models.auth_user import AuthUser
from models.hangout import HangoutCreate, HangoutListResponse, HangoutResponse
from utils.middlewares.auth_user import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hangouts", tags=["Hangouts"])


@router.get("", response_model=HangoutListResponse)
async def list_hangouts(
    current_user: AuthUser = Depends(get_current_user),
) -> HangoutListResponse:
    """Return the caller's hangouts that are not cancelled, newest first."""
    hangouts = hangout_service.list_hangouts_for_user(current_user.id)
    logger.info(f"Fetched {len(hangouts)} hangouts for user {current_user.id}")
    return HangoutListResponse(hangouts=project_hangouts(hangouts, current_user.id))


@router.post("", response_model=HangoutResponse, status_code=status.HTTP_201_CREATED)
async def create_hangout(
    payload: HangoutCreate,
    current_user: AuthUser = Depends(get_current_user),
) -> HangoutResponse:
    hangout = hangout_service.create_hangout(
        host_id=current_user.id,
        participant_ids=payload.participant_ids,
        activity_description=payload.activity_description,
        details=payload.details,
        scheduled_at=payload.scheduled_at,
    )
    return project_hangout(hangout, current_user.id)


@router.delete("/{hangout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_hangout(
    hangout_id: str,
    current_user: AuthUser = Depends(get_current_user),
) -> Response:
    hangout_service.cancel_hangout(hangout_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{hangout_id}/accept", response_model=HangoutResponse)
async def accept_hangout(
    hangout_id: str,
    current_user: AuthUser = Depends(get_current_user),
) -> HangoutResponse:
    hangout = hangout_service.respond_to_hangout(hangout_id, current_user.id, "accept")
    return project_hangout(hangout, current_user.id)


@router.put("/{hangout_id}/reject", response_model=HangoutResponse)
async def reject_hangout(
    hangout_id: str,
    current_user: AuthUser = Depends(get_current_user),
) -> HangoutResponse:
    hangout = hangout_service.respond_to_hangout(hangout_id, current_user.id, "reject")
    return project_hangout(hangout, current_user.id)
