from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from models.user import UserSummary


class HangoutCreate(BaseModel):
    participant_ids: List[str]
    activity_description: str
    details: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class HangoutResponse(BaseModel):
    id: str
    host_id: str
    host: Optional[UserSummary]
    participants: List[UserSummary]
    participant_degrees: Dict[str, str]
    unreachable_participant_ids: List[str]
    accepted_by: List[str]
    rejected_by: List[str]
    status: Literal["pending_approval", "pending", "confirmed", "cancelled"]
    activity_description: str
    details: Optional[str]
    scheduled_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    can_respond: bool


class HangoutListResponse(BaseModel):
    hangouts: List[HangoutResponse]
