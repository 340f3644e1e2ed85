"""Model exports."""
from app.models.user import User
from app.models.post import Post, Comment, Like

__all__ = [
    "User",
    "Post",
    "Comment",
    "Like",
]
