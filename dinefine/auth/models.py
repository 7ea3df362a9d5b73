from __future__ import annotations

from pydantic import BaseModel, Field


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    username: str = Field(..., min_length=1, max_length=50)
    phone_number: str | None = Field(default=None, max_length=32)
    accept_terms: bool = Field(..., description="Terms of Service must be accepted")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str
