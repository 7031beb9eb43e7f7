from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from redis.exceptions import RedisError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException


class APIError(Exception):
    def __init__(self, status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}


class Unauthorized(APIError):
    """Missing, invalid or expired credentials. The message never says which."""

    def __init__(self) -> None:
        super().__init__(401, "UNAUTHORIZED", "Unauthorized")


class NotFound(APIError):
    """Covers both absent resources and resources the requester may not see."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(404, "NOT_FOUND", message)


AccessError = NotFound


class BadRequest(APIError):
    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(400, "BAD_REQUEST", message, details)


class InvalidParent(APIError):
    def __init__(self, message: str = "Parent not found") -> None:
        super().__init__(400, "INVALID_PARENT", message)


class Conflict(APIError):
    def __init__(self, message: str = "Already exist") -> None:
        super().__init__(400, "ALREADY_EXISTS", message)


class InfrastructureFailure(APIError):
    def __init__(self, message: str = "Backing service unavailable.", details: dict[str, Any] | None = None) -> None:
        super().__init__(503, "INFRASTRUCTURE_FAILURE", message, details)


def error_payload(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):  # type: ignore[no-untyped-def]
        if error.status_code >= 500:
            app.logger.error("%s: %s", error.code, error.message)
        return jsonify(error_payload(error.code, error.message, error.details)), error.status_code

    @app.errorhandler(RedisError)
    def handle_redis_error(error: RedisError):  # type: ignore[no-untyped-def]
        app.logger.error("cache or queue unreachable: %s", error)
        failure = InfrastructureFailure("Cache unavailable.")
        return jsonify(error_payload(failure.code, failure.message)), failure.status_code

    @app.errorhandler(OperationalError)
    def handle_database_error(error: OperationalError):  # type: ignore[no-untyped-def]
        app.logger.error("database unreachable: %s", error.orig)
        failure = InfrastructureFailure("Database unavailable.")
        return jsonify(error_payload(failure.code, failure.message)), failure.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):  # type: ignore[no-untyped-def]
        return (
            jsonify(error_payload("HTTP_ERROR", error.description, {"status": error.code})),
            error.code or 500,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[no-untyped-def]
        app.logger.exception("Unhandled exception", exc_info=error)
        return jsonify(error_payload("INTERNAL_ERROR", "An unexpected error occurred.")), 500
