"""Application errors. Each carries the HTTP status the API answers with."""
from __future__ import annotations


class AppError(Exception):
    status_code = 400
    default_detail = "Bad request"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class UnauthorizedError(AppError):
    status_code = 401
    default_detail = "Unauthorized"


class ForbiddenError(AppError):
    # caller is a party to the message but not its sender
    status_code = 403
    default_detail = "Forbidden"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Conflict"


class ValidationError(AppError):
    status_code = 422
    default_detail = "Invalid input"
