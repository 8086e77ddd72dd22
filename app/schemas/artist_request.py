from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

class ArtistRequestOut(BaseModel):
    id: int
    user_id: int
    full_name: Optional[str] = None
    portfolio_url: Optional[str] = None
    message: Optional[str] = None
    status: Literal["pending", "approved", "rejected"]
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ArtistDecisionIn(BaseModel):
    decision: Literal["approved", "rejected"]
