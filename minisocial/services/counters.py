"""Recompute denormalized counters from the relationship tables.

Graph writes keep counters and relationship rows in one transaction, so
drift should only come from writes made outside ``services.graph`` (bulk
imports, manual fixes). This module finds it and repairs it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from .. import models
from ..database import commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterDrift:
    table: str
    row_id: int
    column: str
    stored: int
    actual: int


def _true_counts(db: Session, column, group_by) -> dict[int, int]:
    stmt = select(group_by, func.count(column)).group_by(group_by)
    return {row_id: count for row_id, count in db.execute(stmt).all()}


def find_counter_drift(db: Session) -> List[CounterDrift]:
    followers = _true_counts(db, models.Follow.id, models.Follow.following_id)
    following = _true_counts(db, models.Follow.id, models.Follow.follower_id)
    posts = _true_counts(db, models.Post.id, models.Post.user_id)
    likes = _true_counts(db, models.Like.id, models.Like.post_id)
    comments = _true_counts(db, models.Comment.id, models.Comment.post_id)

    drift: List[CounterDrift] = []
    user_rows = db.execute(
        select(
            models.User.id,
            models.User.followers_count,
            models.User.following_count,
            models.User.posts_count,
        )
    ).all()
    for user_id, stored_followers, stored_following, stored_posts in user_rows:
        for column, stored, actual in (
            ("followers_count", stored_followers, followers.get(user_id, 0)),
            ("following_count", stored_following, following.get(user_id, 0)),
            ("posts_count", stored_posts, posts.get(user_id, 0)),
        ):
            if stored != actual:
                drift.append(CounterDrift("users", user_id, column, stored, actual))

    post_rows = db.execute(
        select(models.Post.id, models.Post.likes_count, models.Post.comments_count)
    ).all()
    for post_id, stored_likes, stored_comments in post_rows:
        for column, stored, actual in (
            ("likes_count", stored_likes, likes.get(post_id, 0)),
            ("comments_count", stored_comments, comments.get(post_id, 0)),
        ):
            if stored != actual:
                drift.append(CounterDrift("posts", post_id, column, stored, actual))
    return drift


def reconcile_counters(db: Session) -> List[CounterDrift]:
    """Overwrite every drifted counter with its true value; returns what was fixed."""
    drift = find_counter_drift(db)
    tables = {"users": models.User, "posts": models.Post}
    for item in drift:
        logger.warning(
            "counter drift %s.%s id=%s stored=%s actual=%s",
            item.table, item.column, item.row_id, item.stored, item.actual,
        )
        model = tables[item.table]
        db.execute(update(model).where(model.id == item.row_id).values({item.column: item.actual}))
    if drift:
        commit(db)
    return drift
