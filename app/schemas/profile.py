# app/schemas/profile.py
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

RoleName = Literal["owner", "admin", "reviewer", "artist"]

class ProfileOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: Optional[RoleName] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[RoleName] = None   # null explícito = volta a colecionador

class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=160)
    request_artist: bool = False
    portfolio_url: Optional[str] = None
    message: Optional[str] = None

class DeleteUserOut(BaseModel):
    ok: bool = True
    warning: Optional[str] = None
