"""Pydantic schemas for posts, comments and likes.

Envelopes use camelCase keys; post and comment rows keep their column names.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import CamelModel


# --- Post rows ---
class PostSummary(BaseModel):
    """Row returned by the administrative dong query."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    image_url: Optional[str] = None
    created_at: datetime
    admin_dong: Optional[str] = None
    nickname: str


class UpperPostSummary(PostSummary):
    upper_admin_dong: Optional[str] = None


class LocatedPost(PostSummary):
    """Row returned by geometric (viewport/radius) queries."""
    content: str
    lat: float
    lon: float


class PostDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: UUID
    title: str
    content: str
    image_url: Optional[str] = None
    lat: float
    lon: float
    admin_dong: Optional[str] = None
    upper_admin_dong: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    nickname: str


# --- Post envelopes ---
class Location(BaseModel):
    lat: float = Field(allow_inf_nan=False)
    lon: float = Field(allow_inf_nan=False)


class ViewportParams(CamelModel):
    center_lat: float = Field(allow_inf_nan=False)
    center_lon: float = Field(allow_inf_nan=False)
    delta_lat: float = Field(ge=0, allow_inf_nan=False)
    delta_lon: float = Field(ge=0, allow_inf_nan=False)


class PostCreateResponse(CamelModel):
    message: str = "Post created successfully!"
    post_id: int
    user_id: UUID
    title: str
    content: str
    image_url: Optional[str] = None
    lat: float
    lon: float
    admin_dong: str
    upper_admin_dong: str


class PostMutationResponse(CamelModel):
    message: str
    post_id: int


class OwnerRequest(CamelModel):
    """Body carrying the caller's user id for owner-only operations."""
    user_id: UUID


class UserPostsResponse(CamelModel):
    posts: List[PostDetail]


class NearbyPostsResponse(CamelModel):
    message: str
    your_location: Location
    your_admin_dong: str
    nearby_posts: List[PostSummary]


class NearbyUpperPostsResponse(CamelModel):
    message: str
    your_location: Location
    your_upper_admin_dong: str
    nearby_posts: List[UpperPostSummary]


class ViewportPostsResponse(CamelModel):
    message: str
    viewport: ViewportParams
    posts_in_viewport: List[LocatedPost]


class RadiusPostsResponse(CamelModel):
    message: str
    your_location: Location
    radius_km: float
    nearby_posts: List[LocatedPost]


# --- Comments ---
class CommentCreateRequest(CamelModel):
    user_id: UUID
    content: str = Field(min_length=1)


class CommentUpdateRequest(CommentCreateRequest):
    pass


class CommentCreateResponse(CamelModel):
    message: str = "Comment created successfully!"
    comment_id: int
    post_id: int
    user_id: UUID
    content: str


class CommentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    user_id: UUID
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    nickname: str


class CommentListResponse(CamelModel):
    comments: List[CommentItem]


# --- Likes ---
class LikeToggleResponse(CamelModel):
    message: str
    liked: bool


class LikeCountResponse(CamelModel):
    post_id: int
    like_count: int


class LikeStatusResponse(CamelModel):
    post_id: int
    user_id: UUID
    liked: bool
