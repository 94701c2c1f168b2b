from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8


class RegisterRequest(BaseModel):
    # Missing fields still run through the validators so clients get the rule that failed.
    username: str = Field("", validate_default=True)
    password: str = Field("", validate_default=True)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not USERNAME_MIN_LENGTH <= len(v) <= USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        return v


class LoginRequest(BaseModel):
    username: str = Field("", validate_default=True)
    password: str = Field("", validate_default=True)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterOut(BaseModel):
    success: bool = True
    message: str = "User registered"


class LoginOut(BaseModel):
    success: bool = True
    username: str


class LogoutOut(BaseModel):
    success: bool = True


class AuthStatusOut(BaseModel):
    authenticated: bool
    username: str | None = None
