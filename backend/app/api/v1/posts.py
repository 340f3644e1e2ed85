"""Post endpoints: creation, neighborhood queries, owner-only edits."""
import asyncio
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.models import Comment, Like, Post, User
from app.models.user import utcnow
from app.schemas.post import (
    Location,
    NearbyPostsResponse,
    NearbyUpperPostsResponse,
    OwnerRequest,
    PostCreateResponse,
    PostDetail,
    PostMutationResponse,
    RadiusPostsResponse,
    UserPostsResponse,
    ViewportParams,
    ViewportPostsResponse,
)
from app.services.lookups import ensure_owner, get_post_or_404, get_user_or_404
from app.services.neighborhood import NeighborhoodService
from app.services.region_resolver import KakaoRegionResolver, get_region_resolver
from app.services.storage import discard_image, get_storage, store_image
from app.services.storage_base import StorageBackend
from app.utils.audit import log_audit_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

_DETAIL_COLUMNS = (
    Post.id,
    Post.user_id,
    Post.title,
    Post.content,
    Post.image_url,
    Post.lat,
    Post.lon,
    Post.admin_dong,
    Post.upper_admin_dong,
    Post.created_at,
    Post.updated_at,
    User.nickname,
)


def get_neighborhood_service(
    db: AsyncSession = Depends(get_db),
    resolver: KakaoRegionResolver = Depends(get_region_resolver),
) -> NeighborhoodService:
    return NeighborhoodService(db, resolver)


@router.post("", response_model=PostCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    user_id: UUID = Form(..., alias="userId"),
    title: str = Form(..., min_length=1),
    content: str = Form(..., min_length=1),
    lat: float = Form(..., allow_inf_nan=False),
    lon: float = Form(..., allow_inf_nan=False),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    resolver: KakaoRegionResolver = Depends(get_region_resolver),
    storage: StorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Create a post stamped with the admin dong and upper admin dong of its location."""
    await get_user_or_404(db, user_id)

    admin_dong, upper_admin_dong = await asyncio.gather(
        resolver.resolve_admin_dong(lon, lat),
        resolver.resolve_upper_admin_dong(lon, lat),
    )

    image_url = None
    if image is not None:
        image_url = await store_image(storage, image, settings.MAX_IMAGE_SIZE_BYTES)

    post = Post(
        user_id=user_id,
        title=title,
        content=content,
        image_url=image_url,
        lat=lat,
        lon=lon,
        admin_dong=admin_dong.value,
        upper_admin_dong=upper_admin_dong.value,
    )
    db.add(post)
    try:
        await db.commit()
    except Exception:
        await discard_image(storage, image_url)
        raise
    await db.refresh(post)

    log_audit_event(
        "post_created",
        actor_id=user_id,
        details={"post_id": post.id, "admin_dong": post.admin_dong},
    )

    return PostCreateResponse(
        post_id=post.id,
        user_id=post.user_id,
        title=post.title,
        content=post.content,
        image_url=post.image_url,
        lat=post.lat,
        lon=post.lon,
        admin_dong=post.admin_dong,
        upper_admin_dong=post.upper_admin_dong,
    )


@router.get("/nearby", response_model=NearbyPostsResponse)
async def get_nearby_posts(
    current_lat: float = Query(..., alias="currentLat", allow_inf_nan=False),
    current_lon: float = Query(..., alias="currentLon", allow_inf_nan=False),
    service: NeighborhoodService = Depends(get_neighborhood_service),
):
    """Posts in the same administrative dong as the caller."""
    return await service.posts_in_admin_dong(Location(lat=current_lat, lon=current_lon))


@router.get("/nearbyupper", response_model=NearbyUpperPostsResponse)
async def get_nearby_posts_upper(
    current_lat: float = Query(..., alias="currentLat", allow_inf_nan=False),
    current_lon: float = Query(..., alias="currentLon", allow_inf_nan=False),
    service: NeighborhoodService = Depends(get_neighborhood_service),
):
    """Posts in the same upper administrative dong (city + district) as the caller."""
    return await service.posts_in_upper_admin_dong(Location(lat=current_lat, lon=current_lon))


@router.get("/nearbyviewport", response_model=ViewportPostsResponse)
async def get_posts_in_viewport(
    center_lat: float = Query(..., alias="centerLat", allow_inf_nan=False),
    center_lon: float = Query(..., alias="centerLon", allow_inf_nan=False),
    delta_lat: float = Query(..., alias="deltaLat", ge=0, allow_inf_nan=False),
    delta_lon: float = Query(..., alias="deltaLon", ge=0, allow_inf_nan=False),
    service: NeighborhoodService = Depends(get_neighborhood_service),
):
    """Posts inside the map rectangle centered on (centerLat, centerLon)."""
    params = ViewportParams(
        center_lat=center_lat,
        center_lon=center_lon,
        delta_lat=delta_lat,
        delta_lon=delta_lon,
    )
    return await service.posts_in_viewport(params)


@router.get("/nearbyradius", response_model=RadiusPostsResponse)
async def get_posts_within_radius(
    current_lat: float = Query(..., alias="currentLat", allow_inf_nan=False),
    current_lon: float = Query(..., alias="currentLon", allow_inf_nan=False),
    radius_km: Optional[float] = Query(None, alias="radiusKm", gt=0, allow_inf_nan=False),
    service: NeighborhoodService = Depends(get_neighborhood_service),
    settings: Settings = Depends(get_settings),
):
    """Legacy distance-based neighborhood."""
    return await service.posts_within_radius(
        Location(lat=current_lat, lon=current_lon),
        radius_km if radius_km is not None else settings.NEARBY_RADIUS_KM,
    )


@router.get("/user/{user_id}", response_model=UserPostsResponse)
async def get_posts_by_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """All posts written by a user, newest first."""
    await get_user_or_404(db, user_id)
    result = await db.execute(
        select(*_DETAIL_COLUMNS)
        .join(User, Post.user_id == User.id)
        .where(Post.user_id == user_id)
        .order_by(Post.created_at.desc())
    )
    posts = [PostDetail.model_validate(dict(row._mapping)) for row in result.all()]
    return UserPostsResponse(posts=posts)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a post with its author's nickname."""
    result = await db.execute(
        select(*_DETAIL_COLUMNS)
        .join(User, Post.user_id == User.id)
        .where(Post.id == post_id)
    )
    row = result.one_or_none()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found.")
    return PostDetail.model_validate(dict(row._mapping))


@router.put("/{post_id}", response_model=PostMutationResponse)
async def update_post(
    post_id: int,
    user_id: UUID = Form(..., alias="userId"),
    title: Optional[str] = Form(None, min_length=1),
    content: Optional[str] = Form(None, min_length=1),
    image_url_delete_flag: bool = Form(False),
    image_url_update_flag: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Owner-only edit of title, content and image.

    Location and both admin dong labels are fixed at creation and never change here.
    """
    post = await get_post_or_404(db, post_id)
    ensure_owner(post.user_id, user_id, "post")

    if image_url_update_flag and image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An image file is required when image_url_update_flag is set.",
        )
    if image is not None and not image_url_update_flag:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Set image_url_update_flag to replace the image.",
        )

    previous_image_url = post.image_url
    new_image_url = None

    if title is not None:
        post.title = title
    if content is not None:
        post.content = content
    if image_url_delete_flag:
        post.image_url = None
    elif image_url_update_flag:
        new_image_url = await store_image(storage, image, settings.MAX_IMAGE_SIZE_BYTES)
        post.image_url = new_image_url
    post.updated_at = utcnow()

    try:
        await db.commit()
    except Exception:
        await discard_image(storage, new_image_url)
        raise

    if post.image_url != previous_image_url:
        await discard_image(storage, previous_image_url)

    log_audit_event("post_updated", actor_id=user_id, details={"post_id": post_id})
    return PostMutationResponse(message="Post updated successfully!", post_id=post_id)


@router.delete("/{post_id}", response_model=PostMutationResponse)
async def delete_post(
    post_id: int,
    data: OwnerRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Owner-only delete; removes the post's comments and likes with it."""
    post = await get_post_or_404(db, post_id)
    ensure_owner(post.user_id, data.user_id, "post")
    image_url = post.image_url

    await db.execute(delete(Like).where(Like.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    await db.commit()

    await discard_image(storage, image_url)

    log_audit_event("post_deleted", actor_id=data.user_id, details={"post_id": post_id})
    return PostMutationResponse(message="Post deleted successfully!", post_id=post_id)
