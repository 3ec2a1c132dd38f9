"""
Domain errors raised by the attendance and leave engines.

Every business-rule error is recoverable by the caller (fix the input and
resubmit). StoreFailure is the only one treated as fatal for the request.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class HRISError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"detail": self.message}


class ValidationError(HRISError):
    """Malformed or missing input. Carries the offending field(s)."""

    status_code = 422

    def __init__(self, errors: list[dict[str, str]], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors]

    def to_payload(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class NotFound(HRISError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(HRISError):
    status_code = status.HTTP_409_CONFLICT


class Forbidden(HRISError):
    status_code = status.HTTP_403_FORBIDDEN


class StoreFailure(HRISError):
    """The persistence layer failed. Never retried by the engines."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_hris_error(request: Request, exc: HRISError) -> JSONResponse:
    if isinstance(exc, StoreFailure):
        logger.error(
            "Store failure on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc
        )
        payload = {"detail": "Internal server error"}
    else:
        logger.info(
            "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message
        )
        payload = exc.to_payload()
    return JSONResponse(status_code=exc.status_code, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HRISError, _handle_hris_error)
