"""Read endpoints behind the site's pages. JSON only; rendering is done elsewhere."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from inkwell.api.deps import require_admin, require_user
from inkwell.core.database import get_db
from inkwell.models import Comment
from inkwell.schemas.auth import CurrentUser, UserListItem
from inkwell.schemas.posts import (
    AdminOverviewResponse,
    CommentOut,
    DashboardResponse,
    PostDetail,
    PostListResponse,
    PostOut,
)
from inkwell.services import auth as auth_service
from inkwell.services import posts as posts_service

router = APIRouter()


def _comment_out(comment: Comment) -> CommentOut:
    out = CommentOut.model_validate(comment)
    if comment.user is not None:
        out.user_name = comment.user.name
    if comment.post is not None:
        out.post_title = comment.post.title
    return out


@router.get("/", response_model=PostListResponse)
def home(db: Annotated[Session, Depends(get_db)]) -> PostListResponse:
    """Latest posts for the front page."""
    posts = posts_service.get_latest_posts(db)
    return PostListResponse(posts=[PostOut.model_validate(p) for p in posts])


@router.get("/posts", response_model=PostListResponse)
def list_posts(db: Annotated[Session, Depends(get_db)]) -> PostListResponse:
    posts = posts_service.get_all_posts(db)
    return PostListResponse(posts=[PostOut.model_validate(p) for p in posts])


@router.get("/post/{post_id}", response_model=PostDetail)
def read_post(post_id: str, db: Annotated[Session, Depends(get_db)]) -> PostDetail:
    post = posts_service.get_post_by_id(db, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    comments = posts_service.get_comments_by_post(db, post_id)
    return PostDetail(
        post=PostOut.model_validate(post),
        comments=[_comment_out(c) for c in comments],
    )


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    user: Annotated[CurrentUser, Depends(require_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DashboardResponse:
    """The signed-in user's own posts."""
    posts = posts_service.get_posts_by_author(db, user.id)
    return DashboardResponse(user=user, posts=[PostOut.model_validate(p) for p in posts])


@router.get("/admin", response_model=AdminOverviewResponse)
def admin_overview(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminOverviewResponse:
    """List all users and comments (admin only)."""
    users = auth_service.get_all_users(db)
    comments = posts_service.get_all_comments(db)
    return AdminOverviewResponse(
        users=[UserListItem.model_validate(u) for u in users],
        comments=[_comment_out(c) for c in comments],
    )
