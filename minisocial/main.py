import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import database, models  # noqa: F401  (models registers the tables)
from .api import router as api_router
from .core.config import get_settings
from .core.logging import configure_logging
from .errors import SocialError, StorageError

configure_logging()
logger = logging.getLogger(__name__)

# Create the tables
database.Base.metadata.create_all(bind=database.engine)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SocialError)
    async def social_error_handler(request: Request, exc: SocialError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        # The request session is closed by get_db, which discards its open transaction.
        logger.error("%s %s storage failure: %s", request.method, request.url.path, exc)
        error = StorageError("Storage unavailable, please retry")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
        return JSONResponse(status_code=422, content={"kind": "validation_error", "message": message})

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "message": "Mini social backend is running"}

    return app


app = create_app()
