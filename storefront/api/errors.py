"""
API Errors
Domain exceptions, each carrying an HTTP status and a machine-readable code,
plus the handlers that render them as {"error": {message, type, details}}.
"""

import logging
from typing import Optional, Union
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from .config import get_settings

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class; ``code`` becomes ``error.type`` in the response body."""

    code = "APIError"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(APIError):
    """A record looked up by id (or a page of records) does not exist."""

    code = "NotFound"

    def __init__(self, resource: str, resource_id: Optional[Union[int, str]] = None):
        if resource_id is None:
            message = f"{resource} not found"
            details = {"resource": resource}
        else:
            message = f"{resource} not found: {resource_id}"
            details = {"resource": resource, "id": str(resource_id)}
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class InvalidRequestError(APIError):
    """Input passed schema validation but is still unacceptable."""

    code = "ValidationFailed"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class ImageRequiredError(APIError):
    """A product image must be uploaded."""

    code = "ImageRequired"

    def __init__(self, message: str = "Image is required"):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class DuplicateReviewError(APIError):
    """The user has already reviewed this product."""

    code = "DuplicateReview"

    def __init__(self, product_id: Union[int, str]):
        super().__init__(
            message="Product already reviewed",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"product_id": str(product_id)},
        )


class ConcurrentModificationError(APIError):
    """The record was modified by another request before this write committed."""

    code = "ConcurrentModification"

    def __init__(self, resource: str, resource_id: Union[int, str]):
        super().__init__(
            message=f"{resource} was modified concurrently, retry the request",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "id": str(resource_id)},
        )


class AuthenticationError(APIError):
    """
    Credential verification failed.

    Subclasses carry the machine-readable reason in ``code``. The client-side
    session cookie is cleared whenever one of these is rendered.
    """

    code = "Unauthenticated"
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message=message or self.default_message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class UnauthenticatedError(AuthenticationError):
    code = "Unauthenticated"
    default_message = "Authentication failed: token not provided"


class InvalidTokenError(AuthenticationError):
    code = "InvalidToken"
    default_message = "Authentication failed: invalid token"


class TokenExpiredError(AuthenticationError):
    code = "TokenExpired"
    default_message = "Authentication failed: token expired"


class UserNotFoundError(AuthenticationError):
    code = "UserNotFound"
    default_message = "Authentication failed: user not found"


class NotAdminError(APIError):
    """
    Caller lacks admin privileges.

    Reported as 401 rather than 403 to match the established API contract.
    """

    code = "NotAdmin"

    def __init__(self):
        super().__init__(
            message="Authorization failed: not authorized as an admin",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


def _error_body(message: str, error_type: str, details=None) -> dict:
    body = {"message": message, "type": error_type}
    if details is not None:
        body["details"] = details
    return {"error": body}


def setup_error_handlers(app: FastAPI) -> None:
    """Register the handlers on ``app``; unknown exceptions become a generic 500."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"API error: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "error_type": exc.code,
                "details": exc.details,
                "path": request.url.path,
            },
        )

        response = JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.code, exc.details),
        )

        if isinstance(exc, AuthenticationError):
            settings = app.dependency_overrides.get(get_settings, get_settings)()
            response.delete_cookie(settings.auth_cookie_name, path="/")

        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error: {exc}", extra={"path": request.url.path})

        # ctx may hold exception objects, keep only serializable parts
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", ())), "message": str(error.get("msg", ""))}
            for error in exc.errors()
        ]

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Request validation failed", InvalidRequestError.code, errors),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("An unexpected error occurred", "InternalServerError"),
        )
