"""Posts and comments CRUD, plus excerpt generation."""

import re
from datetime import datetime, timezone

from sqlalchemy.orm import Session, joinedload

from inkwell.core.security import new_identifier
from inkwell.models import Comment, Post

EXCERPT_MAX_LENGTH = 150
LATEST_POSTS_LIMIT = 5

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """Plain-text summary: tags stripped, whitespace collapsed, '...' appended when cut."""
    plain_text = _WHITESPACE_RE.sub(" ", _TAG_RE.sub("", content)).strip()
    if len(plain_text) <= max_length:
        return plain_text
    return plain_text[:max_length].strip() + "..."


# --- Posts -----------------------------------------------------------------


def create_post(
    db: Session,
    title: str,
    content: str,
    author_id: str,
    excerpt: str | None = None,
    *,
    now: datetime | None = None,
) -> Post:
    current = now or _utcnow()
    post = Post(
        id=new_identifier(),
        title=title,
        content=content,
        excerpt=excerpt or generate_excerpt(content),
        author_id=author_id,
        created_at=current,
        updated_at=current,
    )
    db.add(post)
    db.commit()
    return post


def get_post_by_id(db: Session, post_id: str) -> Post | None:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.id == post_id)
        .first()
    )


def get_latest_posts(db: Session, limit: int = LATEST_POSTS_LIMIT) -> list[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc())
        .limit(limit)
        .all()
    )


def get_all_posts(db: Session) -> list[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc())
        .all()
    )


def get_posts_by_author(db: Session, author_id: str) -> list[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.author_id == author_id)
        .order_by(Post.created_at.desc())
        .all()
    )


def update_post(
    db: Session,
    post_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    excerpt: str | None = None,
    now: datetime | None = None,
) -> Post | None:
    """
    Change the supplied fields. A new content gets the supplied excerpt or a
    freshly derived one; an excerpt without content is ignored.
    """
    post = db.query(Post).filter(Post.id == post_id).first()
    if post is None:
        return None

    if title:
        post.title = title
    if content:
        post.content = content
        post.excerpt = excerpt or generate_excerpt(content)
    post.updated_at = now or _utcnow()
    db.commit()
    return post


def delete_post(db: Session, post_id: str) -> int:
    """Delete a post and, by cascade, its comments. Idempotent."""
    deleted = (
        db.query(Post)
        .filter(Post.id == post_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


# --- Comments --------------------------------------------------------------


def create_comment(
    db: Session,
    content: str,
    post_id: str,
    user_id: str,
    *,
    now: datetime | None = None,
) -> Comment:
    comment = Comment(
        id=new_identifier(),
        content=content,
        post_id=post_id,
        user_id=user_id,
        created_at=now or _utcnow(),
    )
    db.add(comment)
    db.commit()
    return comment


def get_comment_by_id(db: Session, comment_id: str) -> Comment | None:
    return db.query(Comment).filter(Comment.id == comment_id).first()


def get_comments_by_post(db: Session, post_id: str) -> list[Comment]:
    return (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc())
        .all()
    )


def get_all_comments(db: Session) -> list[Comment]:
    return (
        db.query(Comment)
        .options(joinedload(Comment.user), joinedload(Comment.post))
        .order_by(Comment.created_at.desc())
        .all()
    )


def delete_comment(db: Session, comment_id: str) -> int:
    deleted = (
        db.query(Comment)
        .filter(Comment.id == comment_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
