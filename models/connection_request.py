from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from models.user import UserSummary


class ConnectionRequestResponse(BaseModel):
    id: str
    requester_id: str
    requested_id: str
    approver_id: str
    hangout_id: str
    status: Literal["pending", "approved", "rejected"]
    requester: Optional[UserSummary]
    requested: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime


class ConnectionRequestListResponse(BaseModel):
    requests: List[ConnectionRequestResponse]


class ConnectionDecision(BaseModel):
    decision: Literal["approved", "rejected"]
