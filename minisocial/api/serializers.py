from __future__ import annotations

from .. import schemas
from ..core.config import get_settings
from ..services.feed import FeedPage

DEFAULT_PAGE_SIZE = get_settings().FEED_PAGE_SIZE
MAX_PAGE_SIZE = get_settings().MAX_PAGE_SIZE


def serialize_feed_page(page: FeedPage) -> schemas.FeedResponse:
    posts = []
    for item in page.items:
        post = schemas.FeedPost.model_validate(item.post)
        post.is_liked = item.is_liked
        posts.append(post)
    return schemas.FeedResponse(
        posts=posts,
        page=page.page,
        limit=page.limit,
        has_more=page.has_more,
        total_posts=page.total_posts,
    )
