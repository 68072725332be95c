from fastapi import APIRouter, status

from .. import schemas
from ..services import users as user_service
from .dependencies import DbSession

router = APIRouter()

@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, db: DbSession):
    """
    Registers a new user and returns the public profile
    """
    user = user_service.register_user(
        db,
        username=payload.username,
        password=payload.password,
        full_name=payload.full_name,
        email=payload.email,
        bio=payload.bio,
    )
    return schemas.RegisterResponse(user=schemas.UserPublic.model_validate(user))

@router.post("/login", response_model=schemas.TokenResponse)
def login(payload: schemas.LoginRequest, db: DbSession):
    """
    Exchanges username and password for a bearer token
    """
    user, token = user_service.authenticate(db, payload.username, payload.password)
    return schemas.TokenResponse(access_token=token, user_id=user.id, username=user.username)
