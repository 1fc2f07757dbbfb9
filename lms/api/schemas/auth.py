"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from lms.api.schemas.courses import CourseItem
from lms.domain import User

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Request schema for student registration."""

    username: str = Field(..., min_length=3, max_length=150, description="Unique username")
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (8-72 characters, bcrypt limit)",
    )

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    """Request schema for user login."""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


# --- Response Schemas ---


class UserResponse(BaseModel):
    """Response schema for user data."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    role: str = Field(..., description="User role")
    created_at: datetime | None = Field(None, description="Account creation timestamp")

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        return cls(
            id=user.user_id,
            username=user.username,
            role=user.role.value,
            created_at=user.created_at,
        )


class UserDetailResponse(BaseModel):
    """A user together with the courses they are and are not enrolled in."""

    user: UserResponse
    enrolled_courses: list[CourseItem] = Field(default_factory=list)
    available_courses: list[CourseItem] = Field(default_factory=list)


class RegisterResponse(BaseModel):
    message: str = Field(default="Registration successful")
    user: UserResponse


class LoginResponse(BaseModel):
    message: str = Field(default="Login successful")
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
