"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, Field

from app.schemas.base import CamelModel


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=8)


class TokenResponse(CamelModel):
    token: str
    user_id: str
    username: str


class MeResponse(CamelModel):
    user_id: str
    username: str
