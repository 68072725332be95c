from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from .. import models
from ..core.config import get_settings
from ..errors import ValidationError


@dataclass
class FeedItem:
    post: models.Post
    is_liked: bool = False


@dataclass
class FeedPage:
    page: int
    limit: int
    total_posts: int
    items: List[FeedItem] = field(default_factory=list)

    @property
    def has_more(self) -> bool:
        return (self.page - 1) * self.limit + self.limit < self.total_posts


def _check_paging(page: int, page_size: int) -> None:
    if page < 1:
        raise ValidationError("page must be at least 1")
    if page_size < 1:
        raise ValidationError("limit must be at least 1")


def _liked_post_ids(db: Session, viewer_id: int, post_ids: Sequence[int]) -> set[int]:
    if not post_ids:
        return set()
    stmt = select(models.Like.post_id).where(
        models.Like.user_id == viewer_id,
        models.Like.post_id.in_(post_ids),
    )
    return set(db.scalars(stmt).all())


def _paginate(db: Session, condition, page: int, page_size: int, viewer_id: int | None) -> FeedPage:
    count_stmt = select(func.count()).select_from(models.Post)
    posts_stmt = select(models.Post).options(joinedload(models.Post.author))
    if condition is not None:
        count_stmt = count_stmt.where(condition)
        posts_stmt = posts_stmt.where(condition)

    total = db.scalar(count_stmt) or 0
    posts = db.scalars(
        posts_stmt.order_by(models.Post.created_at.desc(), models.Post.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    liked = _liked_post_ids(db, viewer_id, [p.id for p in posts]) if viewer_id is not None else set()
    items = [FeedItem(post=post, is_liked=post.id in liked) for post in posts]
    return FeedPage(page=page, limit=page_size, total_posts=total, items=items)


def get_feed(db: Session, viewer_id: int, page: int = 1, page_size: int | None = None) -> FeedPage:
    """Posts by the viewer and everyone the viewer follows, newest first."""
    if page_size is None:
        page_size = get_settings().FEED_PAGE_SIZE
    _check_paging(page, page_size)

    followed = select(models.Follow.following_id).where(models.Follow.follower_id == viewer_id)
    condition = or_(models.Post.user_id == viewer_id, models.Post.user_id.in_(followed))
    return _paginate(db, condition, page, page_size, viewer_id)


def get_global_feed(
    db: Session, page: int = 1, page_size: int | None = None, viewer_id: int | None = None
) -> FeedPage:
    if page_size is None:
        page_size = get_settings().FEED_PAGE_SIZE
    _check_paging(page, page_size)
    return _paginate(db, None, page, page_size, viewer_id)


def search_users(db: Session, query: str, limit: int | None = None) -> Sequence[models.User]:
    """Case-insensitive substring search over username and full name."""
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query must not be empty")
    cap = get_settings().SEARCH_RESULT_LIMIT
    limit = min(limit or cap, cap)

    stmt = (
        select(models.User)
        .where(
            or_(
                models.User.username.icontains(query, autoescape=True),
                models.User.full_name.icontains(query, autoescape=True),
            )
        )
        .order_by(models.User.username.asc())
        .limit(limit)
    )
    return db.scalars(stmt).all()
