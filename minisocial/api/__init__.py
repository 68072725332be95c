from fastapi import APIRouter

from .auth import router as auth_router
from .feed import router as feed_router
from .posts import comments_router, router as posts_router
from .users import router as users_router

router = APIRouter()

router.include_router(auth_router, tags=["auth"])
router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(posts_router, prefix="/posts", tags=["posts"])
router.include_router(comments_router, prefix="/comments", tags=["comments"])
router.include_router(feed_router, prefix="/feed", tags=["feed"])
