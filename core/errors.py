# core/errors.py

from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from core.logging_config import logger


class APIError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFound(APIError):
    status_code = 404
    default_message = "Not found"


class Forbidden(APIError):
    status_code = 403
    default_message = "Not authorized"


class Unauthenticated(APIError):
    status_code = 401
    default_message = "Not authorized to access this route"


class BusinessRuleViolation(APIError):
    status_code = 400
    default_message = "Request violates a business rule"


class Unavailable(BusinessRuleViolation):
    default_message = "Property is not available for booking"


class InvalidDate(BusinessRuleViolation):
    default_message = "Move-in date cannot be before the property's availability date"


class InvalidTransition(BusinessRuleViolation):
    default_message = "Booking status can only be updated for pending requests"


class ServerError(APIError):
    status_code = 500


# ============================================================
# Response rendering
# ============================================================
def error_body(error: APIError) -> dict:
    body = {"detail": error.message}
    if isinstance(error, ValidationError) and error.errors:
        body["errors"] = error.errors
    return body


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "msg": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"detail": "Invalid input", "errors": errors})

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(request: Request, exc: PyMongoError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        error = ServerError()
        return JSONResponse(status_code=error.status_code, content=error_body(error))
