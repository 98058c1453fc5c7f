from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class UserSummary(BaseModel):
    id: str
    name: str
    profile_image_url: str


class UserResponse(BaseModel):
    id: str
    name: str
    bio: str
    profile_image_url: str
    phone_number: Optional[str]
    first_degree_friend_ids: List[str]
    approved_second_degree_connections: List[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class UserListResponse(BaseModel):
    users: List[UserResponse]


class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    friend_ids: Optional[List[str]] = None
