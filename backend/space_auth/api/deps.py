"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request
from marshmallow import Schema

from space_auth.services.session.service import SessionService

F = TypeVar("F", bound=Callable[..., Any])

SESSION_SERVICE_KEY = "session_service"


def get_session_service() -> SessionService:
    """Return the :class:`SessionService` wired at application start-up."""

    service = current_app.extensions.get(SESSION_SERVICE_KEY)
    if service is None:
        raise RuntimeError("SessionService is not initialized. Call create_app() first.")
    return cast(SessionService, service)


def load_body(schema: Schema) -> dict[str, Any]:
    """Validate the JSON request body; raises marshmallow ``ValidationError``."""

    return cast(dict[str, Any], schema.load(request.get_json(silent=True) or {}))


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    """Return an empty ``204 No Content`` response."""

    return Response(status=204)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
