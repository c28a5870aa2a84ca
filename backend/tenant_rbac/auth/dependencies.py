"""
FastAPI adapter - permission-based dependency injection for host applications.

The core never authenticates anyone. The host passes its own dependency that
resolves the current ``UserContext`` (or None), and these factories turn the
core's yes/no decisions into 403 responses.
"""
from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.invariants import InvariantViolation
from ..errors import (
    AppError,
    InternalError,
    PermissionError,
    ValidationError,
    error_payload,
    resolve_error_code,
)
from ..schemas.user import UserContext
from ..services.authorization import has_all_permissions, require_permission as _require

logger = logging.getLogger(__name__)

UserDependency = Callable[..., UserContext | None]


def require_permission(permission: str, user_dependency: UserDependency) -> Callable:
    """
    Enforce a single permission.

    Args:
        permission: Full permission path, e.g. ``crm.leads.delete``
        user_dependency: Host dependency resolving the current user

    Returns:
        Dependency function that raises PermissionError (403) when denied
    """
    async def dependency(
        request: Request,
        user: UserContext | None = Depends(user_dependency),
    ) -> UserContext | None:
        try:
            _require(user, permission)
        except PermissionError:
            logger.info(
                "permission_denied_request method=%s path=%s permission=%s",
                request.method,
                request.url.path,
                permission,
            )
            raise
        return user

    return dependency


def require_permissions(*permissions: str, user_dependency: UserDependency) -> Callable:
    """
    Enforce several permissions; the user must hold ALL of them.

    Returns:
        Dependency function that raises PermissionError (403) when any is missing
    """
    async def dependency(
        request: Request,
        user: UserContext | None = Depends(user_dependency),
    ) -> UserContext | None:
        if has_all_permissions(user, permissions):
            return user
        logger.warning(
            "permission_denied user_id=%s permissions=%s method=%s path=%s",
            user.user_id if user is not None else None,
            ",".join(permissions),
            request.method,
            request.url.path,
        )
        raise PermissionError(
            f"Permission denied: {', '.join(permissions)} required",
            details={"required_permissions": list(permissions)},
        )

    return dependency


def _log_error(request: Request, status_code: int, code: str, message: str, exc: Exception | None = None) -> None:
    request_id = request.headers.get("x-request-id")
    log_message = f"[{code}] path={request.url.path} request_id={request_id or 'n/a'} message={message}"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(log_message, exc_info=exc)
    else:
        logger.warning(log_message)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    _log_error(request, exc.status_code, exc.code, exc.message, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = resolve_error_code(exc.status_code)
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    _log_error(request, exc.status_code, code, message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code, message, None),
        headers=getattr(exc, "headers", None),
    )


async def handle_invariant_violation(request: Request, exc: InvariantViolation) -> JSONResponse:
    message = str(exc)
    _log_error(request, status.HTTP_400_BAD_REQUEST, ValidationError.code, message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(
            ValidationError.code,
            message,
            {"invariant": exc.invariant, **exc.details},
        ),
    )


async def handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    _log_error(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError.code,
        InternalError.message,
        exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(InternalError.code, InternalError.message, None),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render core errors as ``{"error": {"code", "message", "details"}}``."""
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(InvariantViolation, handle_invariant_violation)
    app.add_exception_handler(Exception, handle_unhandled_exception)
