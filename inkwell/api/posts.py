"""Post and comment form actions. Owners and admins may edit or delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inkwell.api.deps import get_current_user
from inkwell.api.responses import redirect_to
from inkwell.core.database import get_db
from inkwell.schemas.auth import CurrentUser
from inkwell.services import posts as posts_service

logger = logging.getLogger(__name__)
posts_router = APIRouter()
comments_router = APIRouter()


def _clean(value: str | None) -> str | None:
    """Strip form input; blank becomes None."""
    if value is None:
        return None
    return value.strip() or None


def _may_modify(user: CurrentUser, owner_id: str) -> bool:
    return owner_id == user.id or user.is_admin


# --- Posts -----------------------------------------------------------------


@posts_router.post("/create")
def create_post(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    excerpt: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    if user is None:
        return redirect_to("/login", error="Please log in to create a post")

    title, content, excerpt = _clean(title), _clean(content), _clean(excerpt)
    if not title or not content:
        return redirect_to("/dashboard/new", error="Title and content are required")

    try:
        posts_service.create_post(db, title, content, user.id, excerpt)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create post error")
        return redirect_to("/dashboard/new", error="Failed to create post")

    return redirect_to("/dashboard", success="Post created successfully!")


@posts_router.post("/update")
def update_post(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    post_id: Annotated[str | None, Form(alias="postId")] = None,
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    excerpt: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    if user is None:
        return redirect_to("/login", error="Please log in to edit posts")

    post_id, title, content, excerpt = (
        _clean(post_id), _clean(title), _clean(content), _clean(excerpt)
    )
    if not post_id or not title or not content:
        return redirect_to("/dashboard", error="Invalid post data")

    try:
        existing = posts_service.get_post_by_id(db, post_id)
        if existing is None:
            return redirect_to("/dashboard", error="Post not found")
        if not _may_modify(user, existing.author_id):
            return redirect_to("/dashboard", error="You can only edit your own posts")
        posts_service.update_post(
            db, post_id, title=title, content=content, excerpt=excerpt
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Update post error")
        return redirect_to("/dashboard", error="Failed to update post")

    return redirect_to("/dashboard", success="Post updated successfully!")


@posts_router.post("/delete")
def delete_post(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    post_id: Annotated[str | None, Form(alias="postId")] = None,
) -> RedirectResponse:
    if user is None:
        return redirect_to("/login", error="Please log in to delete posts")

    post_id = _clean(post_id)
    if not post_id:
        return redirect_to("/dashboard", error="Invalid post")

    try:
        existing = posts_service.get_post_by_id(db, post_id)
        if existing is None:
            return redirect_to("/dashboard", error="Post not found")
        if not _may_modify(user, existing.author_id):
            return redirect_to("/dashboard", error="You can only delete your own posts")
        posts_service.delete_post(db, post_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Delete post error")
        return redirect_to("/dashboard", error="Failed to delete post")

    return redirect_to("/dashboard", success="Post deleted successfully!")


# --- Comments --------------------------------------------------------------


@comments_router.post("/create")
def create_comment(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    post_id: Annotated[str | None, Form(alias="postId")] = None,
    content: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    if user is None:
        return redirect_to("/login", error="Please log in to comment")

    post_id, content = _clean(post_id), _clean(content)
    if not post_id:
        return redirect_to("/", error="Post not found")
    if not content:
        return redirect_to(f"/post/{post_id}", error="Comment content is required")

    try:
        if posts_service.get_post_by_id(db, post_id) is None:
            return redirect_to("/", error="Post not found")
        posts_service.create_comment(db, content, post_id, user.id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create comment error")
        return redirect_to("/", error="Failed to post comment")

    return redirect_to(f"/post/{post_id}", success="Comment posted!", fragment="comments")


@comments_router.post("/delete")
def delete_comment(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser | None, Depends(get_current_user)],
    comment_id: Annotated[str | None, Form(alias="commentId")] = None,
    post_id: Annotated[str | None, Form(alias="postId")] = None,
) -> RedirectResponse:
    if user is None:
        return redirect_to("/login", error="Please log in")

    comment_id, post_id = _clean(comment_id), _clean(post_id)
    if not comment_id or not post_id:
        return redirect_to(f"/post/{post_id}" if post_id else "/", error="Invalid comment")
    post_path = f"/post/{post_id}"

    try:
        comment = posts_service.get_comment_by_id(db, comment_id)
        if comment is None:
            return redirect_to(post_path, error="Comment not found")
        if not _may_modify(user, comment.user_id):
            return redirect_to(post_path, error="You can only delete your own comments")
        posts_service.delete_comment(db, comment_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Delete comment error")
        return redirect_to("/", error="Failed to delete comment")

    return redirect_to(post_path, success="Comment deleted", fragment="comments")
