from celery import Celery
from collections import Counter
from faker import Faker
from datetime import datetime, timedelta
import logging
import random
from sqlalchemy import func, select

from . import models
from .core.config import get_settings
from .core.logging import configure_logging
from .core.security import hash_password
from .database import SessionLocal
from .services import counters

configure_logging()
logger = logging.getLogger(__name__)

# Configure Celery
celery_app = Celery("minisocial", broker=get_settings().CELERY_BROKER_URL)

BATCH_SIZE = 10000
TEST_PASSWORD = "password123"

def chunk_list(lst, chunk_size):
    """Splits a list into chunks of the given size"""
    return [lst[i:i + chunk_size] for i in range(0, len(lst), chunk_size)]

def _bulk_insert(db, model, rows):
    for batch in chunk_list(rows, BATCH_SIZE):
        db.bulk_insert_mappings(model, batch)
    db.flush()

@celery_app.task(name="generate_test_data")
def generate_test_data(num_users=100, posts_per_user=10, follows_per_user=5, likes_per_user=20):
    """Generates users, posts, follows and likes with matching counters.

    Every generated user logs in with TEST_PASSWORD.
    """
    fake = Faker()
    base_date = datetime.now() - timedelta(days=365)
    password_hash = hash_password(TEST_PASSWORD)

    with SessionLocal() as db:
        offset = db.scalar(select(func.max(models.User.id))) or 0
        users_data = [{
            "username": f"user_{offset + i}_{fake.user_name()}"[:50],
            "full_name": fake.name(),
            "bio": fake.sentence(),
            "password_hash": password_hash,
            "followers_count": 0,
            "following_count": 0,
            "posts_count": posts_per_user,
        } for i in range(num_users)]
        _bulk_insert(db, models.User, users_data)
        user_ids = list(db.scalars(
            select(models.User.id).where(models.User.id > offset).order_by(models.User.id)
        ))

        posts_data = [{
            "content": fake.text(max_nb_chars=200),
            "user_id": user_id,
            "likes_count": 0,
            "comments_count": 0,
            "created_at": base_date + timedelta(
                days=random.randint(0, 365),
                hours=random.randint(0, 23),
                minutes=random.randint(0, 59)
            )
        } for user_id in user_ids for _ in range(posts_per_user)]
        _bulk_insert(db, models.Post, posts_data)
        post_ids = list(db.scalars(
            select(models.Post.id).where(models.Post.user_id.in_(user_ids))
        ))

        followers, following = Counter(), Counter()
        follows_data = []
        for user_id in user_ids:
            others = [other for other in user_ids if other != user_id]
            for target in random.sample(others, min(follows_per_user, len(others))):
                follows_data.append({"follower_id": user_id, "following_id": target})
                following[user_id] += 1
                followers[target] += 1
        _bulk_insert(db, models.Follow, follows_data)

        likes = Counter()
        likes_data = []
        for user_id in user_ids:
            for post_id in random.sample(post_ids, min(likes_per_user, len(post_ids))):
                likes_data.append({"post_id": post_id, "user_id": user_id})
                likes[post_id] += 1
        _bulk_insert(db, models.Like, likes_data)

        db.bulk_update_mappings(models.User, [
            {"id": user_id, "followers_count": followers[user_id], "following_count": following[user_id]}
            for user_id in user_ids
        ])
        db.bulk_update_mappings(models.Post, [
            {"id": post_id, "likes_count": count} for post_id, count in likes.items()
        ])
        db.commit()

    logger.info(
        "generated %s users, %s posts, %s follows, %s likes",
        len(user_ids), len(post_ids), len(follows_data), len(likes_data),
    )
    return {
        "users": len(user_ids),
        "posts": len(post_ids),
        "follows": len(follows_data),
        "likes": len(likes_data),
    }

@celery_app.task(name="reconcile_counters")
def reconcile_counters():
    """Rewrites counters that drifted from the relationship tables"""
    with SessionLocal() as db:
        fixed = counters.reconcile_counters(db)
    logger.info("counter reconciliation fixed %s values", len(fixed))
    return len(fixed)
