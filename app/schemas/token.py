# app/schemas/token.py
from typing import Optional
from pydantic import BaseModel
from app.schemas.profile import ProfileOut

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class AuthResponse(TokenPair):
    user: Optional[ProfileOut] = None
