import logging
from typing import List, Optional

from business.errors import ForbiddenError, NotFoundError, ValidationFailureError
from database import user as user_repo
from database.user import User
from models.auth_user import AuthUser
from utils.constants import MAX_FIRST_DEGREE_FRIENDS

logger = logging.getLogger(__name__)


def get_or_create_user_from_auth(auth_user: AuthUser) -> User:
    """
    Business logic to get or create a user from an authenticated user.

    Identity is issued elsewhere; the first request carrying a new subject
    materializes the user with an empty friend list.

    Args:
        auth_user: Authenticated user from JWT token

    Returns:
        The user stored in the database
    """
    existing_user = user_repo.get_user_by_id(auth_user.id)
    if existing_user:
        return existing_user

    new_user = user_repo.create_user(
        user_id=auth_user.id,
        name=auth_user.name or auth_user.id,
        profile_image_url=auth_user.picture or "",
        phone_number=auth_user.phone_number,
    )

    logger.info(f"Created new user {new_user.name} with ID: {new_user.id}")
    return new_user


def _clean_friend_ids(user_id: str, friend_ids: List[str]) -> List[str]:
    """Keep order, drop duplicates, the user itself and ids with no account."""
    ordered = [fid for fid in dict.fromkeys(friend_ids) if fid and fid != user_id]

    existing = {user.id for user in user_repo.get_users_by_ids(ordered)}
    dropped = [fid for fid in ordered if fid not in existing]
    if dropped:
        logger.warning(f"Ignoring unknown friend ids for user {user_id}: {dropped}")
    cleaned = [fid for fid in ordered if fid in existing]

    # The cap applies to what would be stored.
    if len(cleaned) > MAX_FIRST_DEGREE_FRIENDS:
        raise ValidationFailureError(
            f"You can have a maximum of {MAX_FIRST_DEGREE_FRIENDS} friends"
        )
    return cleaned


def update_user_profile(
    user_id: str,
    actor_id: str,
    name: Optional[str] = None,
    bio: Optional[str] = None,
    profile_image_url: Optional[str] = None,
    friend_ids: Optional[List[str]] = None,
) -> User:
    if user_id != actor_id:
        raise ForbiddenError("User not authorized to update this profile")

    if not user_repo.get_user_by_id(user_id):
        raise NotFoundError("User not found")

    cleaned_friend_ids = (
        _clean_friend_ids(user_id, friend_ids) if friend_ids is not None else None
    )

    user_repo.update_user_profile(
        user_id,
        name=name,
        bio=bio,
        profile_image_url=profile_image_url,
        friend_ids=cleaned_friend_ids,
    )
    if cleaned_friend_ids is not None:
        logger.info(
            f"User {user_id} now lists {len(cleaned_friend_ids)} first-degree friend(s)"
        )

    return user_repo.get_user_by_id(user_id)
