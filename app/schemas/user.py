"""
Pydantic schemas for users and authentication.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class UserRegisterRequest(BaseModel):
    """Request schema for self-registration (never creates admins)."""
    username: str = Field(..., min_length=1, max_length=25)
    password: str = Field(
        ...,
        min_length=5,
        max_length=72,  # bcrypt limit
    )
    first_name: str = Field(..., min_length=1, max_length=30)
    last_name: str = Field(..., min_length=1, max_length=30)
    email: EmailStr

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class UserCreateRequest(UserRegisterRequest):
    """Request schema for admin-created users."""
    is_admin: bool = False


class UserUpdateRequest(BaseModel):
    """Partial update of a user's own profile. username and isAdmin are not accepted."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=5, max_length=72)

    @field_validator("first_name", "last_name", "email", "password")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class UserLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=25)
    password: str = Field(..., min_length=1)

    class Config:
        extra = "forbid"


class TokenResponse(BaseModel):
    """JWT token response."""
    token: str


class UserResponse(BaseModel):
    """User profile response (no password)."""
    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserDetailResponse(UserResponse):
    jobs: List[int] = []


class UserEnvelope(BaseModel):
    user: UserDetailResponse


class UserCreatedResponse(BaseModel):
    user: UserResponse
    token: str


class UserListResponse(BaseModel):
    users: List[UserDetailResponse]


class UserDeletedResponse(BaseModel):
    deleted: str


class ApplicationResponse(BaseModel):
    applied: int
