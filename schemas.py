"""Pydantic request and response schemas for every endpoint."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def check_password_bytes(password: str) -> str:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


class ApiModel(BaseModel):
    """Base schema serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SignupRequest(BaseModel):
    """Body of POST /auth/signup"""
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class LoginRequest(BaseModel):
    """Body of POST /auth/login"""
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class UserOut(ApiModel):
    """Public view of a user; the password hash is never exposed"""
    id: int
    email: str
    created_at: datetime


class TokenOut(ApiModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


class PostOut(ApiModel):
    """Post as returned to clients, with the image as a URL reference"""
    id: int
    title: str
    content: str
    image_url: Optional[str] = None
    image_mime_type: Optional[str] = None
    owner_id: int
    created_at: datetime
    updated_at: datetime


class PostPageOut(ApiModel):
    """One page of posts plus pagination totals"""
    posts: List[PostOut]
    total_posts: int
    current_page: int
    total_pages: int


class MessageOut(BaseModel):
    message: str
