"""Like endpoints.

A like is present or absent per (post, user); the toggle flips it inside a
single transaction and relies on the ``uq_likes_post_user`` constraint so
concurrent toggles can never store the pair twice.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Like
from app.schemas.post import (
    LikeCountResponse,
    LikeStatusResponse,
    LikeToggleResponse,
    OwnerRequest,
)
from app.services.lookups import get_post_or_404, get_user_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Likes"])


async def toggle_like(db: AsyncSession, post_id: int, user_id: UUID) -> bool:
    """Flip the like state of (post, user) and return the new state."""
    removed = await db.execute(
        delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
    )
    if removed.rowcount:
        await db.commit()
        return False

    db.add(Like(post_id=post_id, user_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"Concurrent like detected for post {post_id} by user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Like already exists.",
        )
    return True


@router.post(
    "/{post_id}/likes",
    response_model=LikeToggleResponse,
    responses={status.HTTP_201_CREATED: {"model": LikeToggleResponse}},
)
async def toggle_post_like(
    post_id: int,
    data: OwnerRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Like the post if not yet liked by the user, otherwise remove the like."""
    await get_post_or_404(db, post_id)
    await get_user_or_404(db, data.user_id)

    liked = await toggle_like(db, post_id, data.user_id)
    if liked:
        response.status_code = status.HTTP_201_CREATED
        return LikeToggleResponse(message="Like added successfully!", liked=True)
    return LikeToggleResponse(message="Like removed successfully!", liked=False)


@router.get("/{post_id}/likes/count", response_model=LikeCountResponse)
async def get_like_count(
    post_id: int,
    db: AsyncSession = Depends(get_db),
):
    await get_post_or_404(db, post_id)
    result = await db.execute(select(func.count(Like.id)).where(Like.post_id == post_id))
    return LikeCountResponse(post_id=post_id, like_count=result.scalar_one())


@router.get("/{post_id}/likes/status/{user_id}", response_model=LikeStatusResponse)
async def get_like_status(
    post_id: int,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_post_or_404(db, post_id)
    result = await db.execute(
        select(Like.id).where(Like.post_id == post_id, Like.user_id == user_id)
    )
    return LikeStatusResponse(
        post_id=post_id,
        user_id=user_id,
        liked=result.scalar_one_or_none() is not None,
    )
