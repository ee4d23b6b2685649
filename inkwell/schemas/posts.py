"""Response schemas for posts, comments and the dashboard/admin views."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inkwell.schemas.auth import CurrentUser, UserListItem


class AuthorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class PostOut(BaseModel):
    """A post with its author summary (author is None if the join found nothing)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    excerpt: str
    author_id: str
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary | None = None


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    content: str
    post_id: str
    user_id: str
    created_at: datetime
    user_name: str | None = None
    post_title: str | None = None


class PostDetail(BaseModel):
    post: PostOut
    comments: list[CommentOut] = Field(default_factory=list)


class PostListResponse(BaseModel):
    posts: list[PostOut]


class DashboardResponse(BaseModel):
    """Current user and the posts they authored."""

    user: CurrentUser
    posts: list[PostOut]


class AdminOverviewResponse(BaseModel):
    """Everything the admin view lists: users and all comments."""

    users: list[UserListItem]
    comments: list[CommentOut]
