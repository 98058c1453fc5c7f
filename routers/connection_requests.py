import logging

from fastapi import APIRouter, Depends, Response, status

from business import approval as approval_service
from business.projection import project_connection_requests
from models.auth_user import AuthUser
from models.connection_request import (
    ConnectionDecision,
    ConnectionRequestListResponse,
)
from utils.middlewares.auth_user import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/connection-requests", tags=["Connection Requests"])


@router.get("", response_model=ConnectionRequestListResponse)
async def list_my_connection_requests(
    current_user: AuthUser = Depends(get_current_user),
) -> ConnectionRequestListResponse:
    """Pending approvals routed to the caller as the mutual friend."""
    requests = approval_service.list_pending_requests_for_approver(current_user.id)
    return ConnectionRequestListResponse(requests=project_connection_requests(requests))


@router.put("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def resolve_connection_request(
    request_id: str,
    payload: ConnectionDecision,
    current_user: AuthUser = Depends(get_current_user),
) -> Response:
    approval_service.resolve_connection_request(
        request_id, current_user.id, payload.decision
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
