"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``minisocial.main`` renders each one as
``{"kind": ..., "message": ...}`` with the class's status code.
"""
from __future__ import annotations


class SocialError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(SocialError):
    kind = "validation_error"
    status_code = 400


class NotFoundError(SocialError):
    kind = "not_found"
    status_code = 404


class NotFollowingError(NotFoundError):
    kind = "not_following"
    status_code = 400


class NotLikedError(NotFoundError):
    kind = "not_liked"
    status_code = 400


class AlreadyExistsError(SocialError):
    kind = "already_exists"
    status_code = 400


class ConflictError(AlreadyExistsError):
    # Unique constraint hit by a concurrent insert that passed the existence check.
    kind = "conflict"
    status_code = 409


class SelfFollowError(SocialError):
    kind = "self_follow"
    status_code = 400


class ForbiddenError(SocialError):
    kind = "forbidden"
    status_code = 403


class AuthError(SocialError):
    kind = "unauthorized"
    status_code = 401


class StorageError(SocialError):
    kind = "storage_error"
    status_code = 503
