from typing import List

from fastapi import APIRouter, Query, status

from .. import schemas
from ..services import feed as feed_service
from ..services import graph as graph_service
from .dependencies import CurrentUser, DbSession, OptionalUser, RowId
from .serializers import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, serialize_feed_page

router = APIRouter()
comments_router = APIRouter()

@router.get("", response_model=schemas.FeedResponse)
def list_posts(db: DbSession, viewer: OptionalUser,
               page: int = Query(1, ge=1),
               limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)):
    """
    Global feed: every post, newest first
    """
    result = feed_service.get_global_feed(
        db, page=page, page_size=limit, viewer_id=viewer.id if viewer else None
    )
    return serialize_feed_page(result)

@router.post("", response_model=schemas.PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(payload: schemas.PostCreate, current_user: CurrentUser, db: DbSession):
    return graph_service.create_post(db, current_user.id, payload.content)

@router.get("/{post_id}", response_model=schemas.PostResponse)
def get_post(post_id: RowId, db: DbSession):
    return graph_service.get_post(db, post_id)

@router.delete("/{post_id}", response_model=schemas.Ack)
def delete_post(post_id: RowId, current_user: CurrentUser, db: DbSession):
    """
    Deletes a post with all its likes and comments (author only)
    """
    graph_service.delete_post(db, post_id, current_user.id)
    return schemas.Ack(message="Post deleted successfully")

@router.post("/{post_id}/like", response_model=schemas.Ack)
def like_post(post_id: RowId, current_user: CurrentUser, db: DbSession):
    graph_service.like_post(db, post_id, current_user.id)
    return schemas.Ack(message="Post liked successfully")

@router.delete("/{post_id}/like", response_model=schemas.Ack)
def unlike_post(post_id: RowId, current_user: CurrentUser, db: DbSession):
    graph_service.unlike_post(db, post_id, current_user.id)
    return schemas.Ack(message="Post unliked successfully")

@router.get("/{post_id}/comments", response_model=List[schemas.CommentResponse])
def list_comments(post_id: RowId, db: DbSession):
    return graph_service.list_comments(db, post_id)

@router.post("/{post_id}/comments", response_model=schemas.CommentResponse,
             status_code=status.HTTP_201_CREATED)
def create_comment(post_id: RowId, payload: schemas.CommentCreate,
                   current_user: CurrentUser, db: DbSession):
    return graph_service.create_comment(db, post_id, current_user.id, payload.content)

@comments_router.delete("/{comment_id}", response_model=schemas.Ack)
def delete_comment(comment_id: RowId, current_user: CurrentUser, db: DbSession):
    graph_service.delete_comment(db, comment_id, current_user.id)
    return schemas.Ack(message="Comment deleted successfully")
