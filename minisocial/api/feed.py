from fastapi import APIRouter, Query

from .. import schemas
from ..services import feed as feed_service
from .dependencies import CurrentUser, DbSession
from .serializers import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, serialize_feed_page

router = APIRouter()

@router.get("", response_model=schemas.FeedResponse)
def get_feed(current_user: CurrentUser, db: DbSession,
             page: int = Query(1, ge=1),
             limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)):
    """
    Posts from the current user and everyone they follow, newest first
    """
    result = feed_service.get_feed(db, current_user.id, page=page, page_size=limit)
    return serialize_feed_page(result)
