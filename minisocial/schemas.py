from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # JSON uses camelCase keys; snake_case is still accepted on input.
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# Accounts ---------------------------------------------------------------------------

class UserCreate(CamelModel):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
    password: str = Field(min_length=6, max_length=72)
    full_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    email: Optional[EmailStr] = None
    bio: str = ""


class UserUpdate(CamelModel):
    full_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = None


class LoginRequest(CamelModel):
    username: str
    password: str


class TokenResponse(CamelModel):
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str


class UserSummary(CamelModel):
    id: int
    username: str
    full_name: str


class UserPublic(UserSummary):
    bio: str
    followers_count: int
    following_count: int
    posts_count: int
    created_at: Optional[datetime] = None


class RegisterResponse(CamelModel):
    message: str = "User registered successfully"
    user: UserPublic


# Posts & comments ----------------------------------------------------------------

class PostCreate(CamelModel):
    content: str


class PostResponse(CamelModel):
    id: int
    user_id: int
    content: str
    likes_count: int
    comments_count: int
    created_at: Optional[datetime] = None
    author: UserSummary


class FeedPost(PostResponse):
    is_liked: bool = False


class FeedResponse(CamelModel):
    posts: List[FeedPost]
    page: int
    limit: int
    has_more: bool
    total_posts: int


class CommentCreate(CamelModel):
    content: str


class CommentResponse(CamelModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: Optional[datetime] = None
    author: UserSummary


# Generic ---------------------------------------------------------------------------

class Ack(CamelModel):
    message: str
