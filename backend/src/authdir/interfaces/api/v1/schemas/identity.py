"""Pydantic v2 schemas for session endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class PersonResponse(BaseModel):
    id: UUID
    email: str
    name: str
    first_name: str | None
    last_name: str | None
    full_name: str
    created_at: datetime


class SessionResponse(BaseModel):
    session_id: str
    ip_address: str | None
    user_agent: str | None
    begin_at: datetime
    end_at: datetime

    model_config = {"from_attributes": True}


class CurrentPersonResponse(BaseModel):
    person: PersonResponse
    session: SessionResponse
