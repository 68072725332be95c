from fastapi import APIRouter, Query

from .. import schemas
from ..services import feed as feed_service
from ..services import graph as graph_service
from ..services import users as user_service
from .dependencies import CurrentUser, DbSession, RowId

router = APIRouter()

@router.get("/search", response_model=list[schemas.UserPublic])
def search_users(db: DbSession, q: str = Query(..., max_length=100)):
    """
    Searches users by username or full name (case-insensitive)
    """
    return feed_service.search_users(db, q)

@router.get("/me", response_model=schemas.UserPublic)
def read_me(current_user: CurrentUser):
    return current_user

@router.patch("/me", response_model=schemas.UserPublic)
def update_me(payload: schemas.UserUpdate, current_user: CurrentUser, db: DbSession):
    return user_service.update_profile(
        db, current_user.id, full_name=payload.full_name, bio=payload.bio
    )

@router.get("/{user_id}", response_model=schemas.UserPublic)
def get_user(user_id: RowId, db: DbSession):
    """
    Returns a user's public profile by ID
    """
    return user_service.get_user(db, user_id)

@router.get("/{user_id}/followers", response_model=list[schemas.UserSummary])
def list_followers(user_id: RowId, db: DbSession):
    return graph_service.list_followers(db, user_id)

@router.get("/{user_id}/following", response_model=list[schemas.UserSummary])
def list_following(user_id: RowId, db: DbSession):
    return graph_service.list_following(db, user_id)

@router.post("/{user_id}/follow", response_model=schemas.Ack)
def follow_user(user_id: RowId, current_user: CurrentUser, db: DbSession):
    graph_service.follow(db, current_user.id, user_id)
    return schemas.Ack(message="User followed successfully")

@router.delete("/{user_id}/follow", response_model=schemas.Ack)
def unfollow_user(user_id: RowId, current_user: CurrentUser, db: DbSession):
    graph_service.unfollow(db, current_user.id, user_id)
    return schemas.Ack(message="User unfollowed successfully")
