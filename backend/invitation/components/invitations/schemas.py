from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class InviteBatchCreate(BaseModel):
    invitable_type: str = Field(..., min_length=1, max_length=100)
    invitable_id: int
    # Plain strings: malformed addresses are reported per invite, not rejected wholesale.
    emails: List[str] = Field(..., min_length=1, max_length=100)
    sender_id: Optional[int] = None


class InviteBatchResponse(BaseModel):
    invited: int
    failures: List[str] = Field(default_factory=list)


class InviteClaimRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
    user_id: int


class InviteResponse(BaseModel):
    id: int
    email: str
    invitable_type: str
    invitable_id: int
    recipient_id: Optional[int] = None
    sender_id: Optional[int] = None
    accepted_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}
