"""Comment endpoints."""
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Comment, User
from app.models.user import utcnow
from app.schemas.post import (
    CommentCreateRequest,
    CommentCreateResponse,
    CommentItem,
    CommentListResponse,
    CommentUpdateRequest,
    OwnerRequest,
)
from app.schemas.user import MessageResponse
from app.services.lookups import (
    ensure_owner,
    get_comment_or_404,
    get_post_or_404,
    get_user_or_404,
)

router = APIRouter(prefix="/posts", tags=["Comments"])


@router.post(
    "/{post_id}/comments",
    response_model=CommentCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    data: CommentCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Add a comment to a post."""
    await get_post_or_404(db, post_id)
    await get_user_or_404(db, data.user_id)

    comment = Comment(post_id=post_id, user_id=data.user_id, content=data.content)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    return CommentCreateResponse(
        comment_id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        content=comment.content,
    )


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments(
    post_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Comments of a post, oldest first."""
    await get_post_or_404(db, post_id)
    result = await db.execute(
        select(
            Comment.id,
            Comment.post_id,
            Comment.user_id,
            Comment.content,
            Comment.created_at,
            Comment.updated_at,
            User.nickname,
        )
        .join(User, Comment.user_id == User.id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    comments = [CommentItem.model_validate(dict(row._mapping)) for row in result.all()]
    return CommentListResponse(comments=comments)


@router.put("/comments/{comment_id}", response_model=MessageResponse)
async def update_comment(
    comment_id: int,
    data: CommentUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    comment = await get_comment_or_404(db, comment_id)
    ensure_owner(comment.user_id, data.user_id, "comment")

    comment.content = data.content
    comment.updated_at = utcnow()
    await db.commit()
    return MessageResponse(message="Comment updated successfully!")


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    data: OwnerRequest = Body(...),
    db: AsyncSession = Depends(get_db),
):
    comment = await get_comment_or_404(db, comment_id)
    ensure_owner(comment.user_id, data.user_id, "comment")

    await db.delete(comment)
    await db.commit()
    return MessageResponse(message="Comment deleted successfully!")
