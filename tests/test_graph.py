from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from minisocial import models
from minisocial.database import commit
from minisocial.errors import (
    AlreadyExistsError,
    ConflictError,
    ForbiddenError,
    NotFollowingError,
    NotFoundError,
    NotLikedError,
    SelfFollowError,
    StorageError,
    ValidationError,
)
from minisocial.services import graph


def _reload(db: Session, obj):
    db.expire_all()
    return db.get(type(obj), obj.id)


def _count(db: Session, model, **filters) -> int:
    stmt = select(func.count()).select_from(model).filter_by(**filters)
    return db.scalar(stmt)


# Follows ---------------------------------------------------------------------------

def test_follow_increments_both_counters(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")

    graph.follow(db_session, alice.id, bob.id)

    alice, bob = _reload(db_session, alice), _reload(db_session, bob)
    assert alice.following_count == 1
    assert alice.followers_count == 0
    assert bob.followers_count == 1
    assert bob.following_count == 0


def test_follow_twice_is_rejected_without_touching_counters(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    graph.follow(db_session, alice.id, bob.id)

    with pytest.raises(AlreadyExistsError):
        graph.follow(db_session, alice.id, bob.id)

    assert _reload(db_session, alice).following_count == 1
    assert _reload(db_session, bob).followers_count == 1
    assert _count(db_session, models.Follow) == 1


def test_self_follow_is_rejected(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    with pytest.raises(SelfFollowError):
        graph.follow(db_session, alice.id, alice.id)
    assert _reload(db_session, alice).following_count == 0


def test_follow_missing_target(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    with pytest.raises(NotFoundError):
        graph.follow(db_session, alice.id, 9999)


def test_unfollow_without_follow_leaves_counters(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")

    with pytest.raises(NotFollowingError):
        graph.unfollow(db_session, alice.id, bob.id)

    assert _reload(db_session, alice).following_count == 0
    assert _reload(db_session, bob).followers_count == 0


def test_unfollow_decrements_counters(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    graph.follow(db_session, alice.id, bob.id)

    graph.unfollow(db_session, alice.id, bob.id)

    assert _reload(db_session, alice).following_count == 0
    assert _reload(db_session, bob).followers_count == 0
    assert _count(db_session, models.Follow) == 0


def test_racing_follow_hits_unique_constraint(db_session: Session, make_user, monkeypatch) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    graph.follow(db_session, alice.id, bob.id)
    # A concurrent request that checked before the first insert landed.
    monkeypatch.setattr(graph, "_find_follow", lambda db, follower_id, target_id: None)

    with pytest.raises(ConflictError):
        graph.follow(db_session, alice.id, bob.id)

    assert _reload(db_session, alice).following_count == 1
    assert _reload(db_session, bob).followers_count == 1
    assert _count(db_session, models.Follow) == 1


def test_followers_and_following_lists(db_session: Session, make_user) -> None:
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    graph.follow(db_session, bob.id, alice.id)
    graph.follow(db_session, carol.id, alice.id)
    graph.follow(db_session, alice.id, carol.id)

    followers = {u.username for u in graph.list_followers(db_session, alice.id)}
    following = {u.username for u in graph.list_following(db_session, alice.id)}

    assert followers == {"bob", "carol"}
    assert following == {"carol"}


# Posts & likes ---------------------------------------------------------------------

def test_create_post_increments_posts_count(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    post = graph.create_post(db_session, alice.id, "hello world")

    assert post.likes_count == 0
    assert post.comments_count == 0
    assert _reload(db_session, alice).posts_count == 1


def test_create_post_rejects_blank_content(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    with pytest.raises(ValidationError):
        graph.create_post(db_session, alice.id, "   ")
    assert _reload(db_session, alice).posts_count == 0


def test_like_then_unlike_restores_count(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "like me")

    graph.like_post(db_session, post.id, bob.id)
    assert _reload(db_session, post).likes_count == 1

    graph.unlike_post(db_session, post.id, bob.id)
    assert _reload(db_session, post).likes_count == 0
    assert _count(db_session, models.Like) == 0


def test_like_twice_and_unlike_unliked(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "like me")
    graph.like_post(db_session, post.id, bob.id)

    with pytest.raises(AlreadyExistsError):
        graph.like_post(db_session, post.id, bob.id)
    with pytest.raises(NotLikedError):
        graph.unlike_post(db_session, post.id, alice.id)

    assert _reload(db_session, post).likes_count == 1


def test_like_missing_post(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    with pytest.raises(NotFoundError):
        graph.like_post(db_session, 4242, alice.id)


# Comments --------------------------------------------------------------------------

def test_comment_lifecycle_tracks_comments_count(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "discuss")

    first = graph.create_comment(db_session, post.id, bob.id, "first!")
    graph.create_comment(db_session, post.id, alice.id, "thanks")
    assert _reload(db_session, post).comments_count == 2
    assert [c.content for c in graph.list_comments(db_session, post.id)] == ["first!", "thanks"]

    graph.delete_comment(db_session, first.id, bob.id)
    assert _reload(db_session, post).comments_count == 1


def test_comment_validation_and_ownership(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "discuss")

    with pytest.raises(ValidationError):
        graph.create_comment(db_session, post.id, bob.id, "")
    with pytest.raises(NotFoundError):
        graph.create_comment(db_session, 777, bob.id, "orphan")

    comment = graph.create_comment(db_session, post.id, bob.id, "mine")
    with pytest.raises(ForbiddenError):
        graph.delete_comment(db_session, comment.id, alice.id)
    with pytest.raises(NotFoundError):
        graph.delete_comment(db_session, 999, bob.id)
    assert _reload(db_session, post).comments_count == 1


# Cascading delete ------------------------------------------------------------------

def test_delete_post_cascades(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "going away")
    keeper = graph.create_post(db_session, alice.id, "staying")
    graph.like_post(db_session, post.id, bob.id)
    graph.like_post(db_session, keeper.id, bob.id)
    graph.create_comment(db_session, post.id, bob.id, "bye")
    post_id = post.id

    graph.delete_post(db_session, post_id, alice.id)

    assert db_session.get(models.Post, post_id) is None
    assert graph.list_comments(db_session, post_id) == []
    assert _count(db_session, models.Like, post_id=post_id) == 0
    assert _count(db_session, models.Like, post_id=keeper.id) == 1
    assert _reload(db_session, alice).posts_count == 1


def test_delete_post_by_non_owner_is_forbidden(db_session: Session, make_user) -> None:
    alice, bob = make_user("alice"), make_user("bob")
    post = graph.create_post(db_session, alice.id, "mine")
    graph.like_post(db_session, post.id, bob.id)

    with pytest.raises(ForbiddenError):
        graph.delete_post(db_session, post.id, bob.id)

    post = _reload(db_session, post)
    assert post is not None
    assert post.likes_count == 1
    assert _reload(db_session, alice).posts_count == 1


def test_delete_missing_post(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    with pytest.raises(NotFoundError):
        graph.delete_post(db_session, 123, alice.id)


def test_non_unique_integrity_violation_is_not_a_conflict(db_session: Session, make_user) -> None:
    alice = make_user("alice")
    db_session.add(models.Follow(follower_id=alice.id, following_id=alice.id))

    with pytest.raises(StorageError) as excinfo:
        commit(db_session)

    assert not isinstance(excinfo.value, ConflictError)
    assert _count(db_session, models.Follow) == 0
