"""Social-graph writes that keep the denormalized counters consistent.

Each operation performs the relationship write and its counter adjustments
in one unit of work. Counters are moved with relative ``col = col + 1``
updates, never by writing back a value read into Python, and the unit is
committed once through ``database.commit`` so a failure leaves neither the
relationship row nor the counter change behind.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, joinedload

from .. import models
from ..database import commit
from ..errors import (
    AlreadyExistsError,
    ForbiddenError,
    NotFollowingError,
    NotFoundError,
    NotLikedError,
    SelfFollowError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _adjust(db: Session, model, row_id: int, **deltas: int) -> None:
    values = {name: getattr(model, name) + delta for name, delta in deltas.items()}
    db.execute(update(model).where(model.id == row_id).values(**values))


def _require_user(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _require_post(db: Session, post_id: int) -> models.Post:
    post = db.get(models.Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _find_follow(db: Session, follower_id: int, target_id: int) -> models.Follow | None:
    stmt = select(models.Follow).where(
        models.Follow.follower_id == follower_id,
        models.Follow.following_id == target_id,
    )
    return db.scalars(stmt).first()


def _find_like(db: Session, post_id: int, user_id: int) -> models.Like | None:
    stmt = select(models.Like).where(
        models.Like.post_id == post_id,
        models.Like.user_id == user_id,
    )
    return db.scalars(stmt).first()


# Posts -----------------------------------------------------------------------------

def create_post(db: Session, user_id: int, content: str) -> models.Post:
    if not content or not content.strip():
        raise ValidationError("Post content must not be empty")
    _require_user(db, user_id)

    post = models.Post(content=content, user_id=user_id)
    db.add(post)
    _adjust(db, models.User, user_id, posts_count=1)
    commit(db)
    db.refresh(post)
    logger.info("user %s created post %s", user_id, post.id)
    return post


def get_post(db: Session, post_id: int) -> models.Post:
    stmt = (
        select(models.Post)
        .options(joinedload(models.Post.author))
        .where(models.Post.id == post_id)
    )
    post = db.scalars(stmt).first()
    if post is None:
        raise NotFoundError("Post not found")
    return post


def delete_post(db: Session, post_id: int, requester_id: int) -> None:
    """Delete a post together with its likes and comments.

    Only the author may delete; the author's ``posts_count`` drops by one.
    """
    post = _require_post(db, post_id)
    if post.user_id != requester_id:
        raise ForbiddenError("Only the author can delete this post")

    db.execute(delete(models.Like).where(models.Like.post_id == post_id))
    db.execute(delete(models.Comment).where(models.Comment.post_id == post_id))
    db.delete(post)
    _adjust(db, models.User, post.user_id, posts_count=-1)
    commit(db)
    logger.info("user %s deleted post %s", requester_id, post_id)


# Follows ---------------------------------------------------------------------------

def follow(db: Session, follower_id: int, target_id: int) -> None:
    if follower_id == target_id:
        raise SelfFollowError("You cannot follow yourself")
    _require_user(db, target_id)
    if _find_follow(db, follower_id, target_id) is not None:
        raise AlreadyExistsError("Already following this user")

    db.add(models.Follow(follower_id=follower_id, following_id=target_id))
    _adjust(db, models.User, follower_id, following_count=1)
    _adjust(db, models.User, target_id, followers_count=1)
    commit(db, conflict_message="Already following this user")
    logger.info("user %s followed user %s", follower_id, target_id)


def unfollow(db: Session, follower_id: int, target_id: int) -> None:
    existing = _find_follow(db, follower_id, target_id)
    if existing is None:
        raise NotFollowingError("You are not following this user")

    db.delete(existing)
    _adjust(db, models.User, follower_id, following_count=-1)
    _adjust(db, models.User, target_id, followers_count=-1)
    commit(db)
    logger.info("user %s unfollowed user %s", follower_id, target_id)


def list_followers(db: Session, user_id: int) -> Sequence[models.User]:
    _require_user(db, user_id)
    stmt = (
        select(models.User)
        .join(models.Follow, models.Follow.follower_id == models.User.id)
        .where(models.Follow.following_id == user_id)
        .order_by(models.Follow.created_at.desc(), models.Follow.id.desc())
    )
    return db.scalars(stmt).all()


def list_following(db: Session, user_id: int) -> Sequence[models.User]:
    _require_user(db, user_id)
    stmt = (
        select(models.User)
        .join(models.Follow, models.Follow.following_id == models.User.id)
        .where(models.Follow.follower_id == user_id)
        .order_by(models.Follow.created_at.desc(), models.Follow.id.desc())
    )
    return db.scalars(stmt).all()


# Likes -----------------------------------------------------------------------------

def like_post(db: Session, post_id: int, user_id: int) -> None:
    _require_post(db, post_id)
    if _find_like(db, post_id, user_id) is not None:
        raise AlreadyExistsError("Post already liked")

    db.add(models.Like(post_id=post_id, user_id=user_id))
    _adjust(db, models.Post, post_id, likes_count=1)
    commit(db, conflict_message="Post already liked")
    logger.info("user %s liked post %s", user_id, post_id)


def unlike_post(db: Session, post_id: int, user_id: int) -> None:
    existing = _find_like(db, post_id, user_id)
    if existing is None:
        raise NotLikedError("You have not liked this post")

    db.delete(existing)
    _adjust(db, models.Post, post_id, likes_count=-1)
    commit(db)
    logger.info("user %s unliked post %s", user_id, post_id)


# Comments --------------------------------------------------------------------------

def create_comment(db: Session, post_id: int, user_id: int, content: str) -> models.Comment:
    if not content or not content.strip():
        raise ValidationError("Comment content must not be empty")
    _require_post(db, post_id)

    comment = models.Comment(content=content, post_id=post_id, user_id=user_id)
    db.add(comment)
    _adjust(db, models.Post, post_id, comments_count=1)
    commit(db)
    db.refresh(comment)
    logger.info("user %s commented %s on post %s", user_id, comment.id, post_id)
    return comment


def list_comments(db: Session, post_id: int) -> Sequence[models.Comment]:
    stmt = (
        select(models.Comment)
        .options(joinedload(models.Comment.author))
        .where(models.Comment.post_id == post_id)
        .order_by(models.Comment.created_at.asc(), models.Comment.id.asc())
    )
    return db.scalars(stmt).all()


def delete_comment(db: Session, comment_id: int, requester_id: int) -> None:
    comment = db.get(models.Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.user_id != requester_id:
        raise ForbiddenError("Only the author can delete this comment")

    post_id = comment.post_id
    db.delete(comment)
    _adjust(db, models.Post, post_id, comments_count=-1)
    commit(db)
    logger.info("user %s deleted comment %s", requester_id, comment_id)
