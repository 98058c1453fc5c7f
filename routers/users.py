import logging

from fastapi import APIRouter, Depends, HTTPException, status

from business import user as user_service
from business.projection import to_user_response
from database import user as user_repo
from models.auth_user import AuthUser
from models.user import UserListResponse, UserProfileUpdate, UserResponse
from utils.middlewares.auth_user import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    current_user: AuthUser = Depends(get_current_user),
) -> UserListResponse:
    users = user_repo.list_users()
    return UserListResponse(users=[to_user_response(user) for user in users])


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    user = user_repo.get_user_by_id(current_user.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return to_user_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user_profile(
    user_id: str,
    payload: UserProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Update the caller's profile and, when ``friend_ids`` is given, replace
    their first-degree friend list.
    """
    user = user_service.update_user_profile(
        user_id,
        actor_id=current_user.id,
        name=payload.name,
        bio=payload.bio,
        profile_image_url=payload.profile_image_url,
        friend_ids=payload.friend_ids,
    )
    return to_user_response(user)
