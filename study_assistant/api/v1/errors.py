from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from study_assistant.core.observability.correlation import get_correlation_id
from study_assistant.domain.exceptions import CurriculumLookupError, GenerationError

logger = structlog.get_logger(__name__)


def _error_example(code: str, message: str, details: Any) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": "f6a4c304-1ce0-4cf5-9d8f-5d4deca4f51f",
        }
    }


def error_envelope(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": get_correlation_id(),
        }
    }


ERROR_RESPONSES: dict[int, dict[str, Any]] = {
    400: {
        "description": "Bad Request",
        "content": {
            "application/json": {
                "example": _error_example("INVALID_LEARNER_HEADER", "Invalid learner identity header", None)
            }
        },
    },
    401: {
        "description": "Unauthorized",
        "content": {
            "application/json": {
                "example": _error_example("UNAUTHORIZED", "Unauthorized", "Missing learner identity")
            }
        },
    },
    404: {
        "description": "Not Found",
        "content": {
            "application/json": {
                "example": _error_example("TOPIC_NOT_FOUND", "Topic not found", {"level": "topic"})
            }
        },
    },
    422: {
        "description": "Unprocessable Entity",
        "content": {
            "application/json": {
                "example": _error_example(
                    "FRONTEND_CONTRACT_BREACH",
                    "Request validation failed",
                    [{"loc": ["body", "topic"], "msg": "Field required"}],
                )
            }
        },
    },
    500: {
        "description": "Internal Server Error",
        "content": {
            "application/json": {
                "example": _error_example("INTERNAL_ERROR", "Internal server error", None)
            }
        },
    },
    502: {
        "description": "Bad Gateway",
        "content": {
            "application/json": {
                "example": _error_example(
                    "GENERATION_FAILED",
                    "Error generating content",
                    {"transient": True, "attempts": 2},
                )
            }
        },
    },
}


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = int(status_code)
        self.code = code
        self.message = message
        self.details = details


async def api_error_exception_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, exc.message, exc.details),
    )


async def curriculum_lookup_exception_handler(_: Request, exc: CurriculumLookupError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=error_envelope(f"{exc.level.upper()}_NOT_FOUND", exc.message, {"level": exc.level}),
    )


async def generation_exception_handler(_: Request, exc: GenerationError) -> JSONResponse:
    logger.error(
        "generation_request_failed",
        error=exc.message,
        transient=exc.transient,
        attempts=exc.attempts,
        cause=exc.cause,
    )
    return JSONResponse(
        status_code=502,
        content=error_envelope(
            "GENERATION_FAILED",
            "Error generating content",
            {"transient": exc.transient, "attempts": exc.attempts},
        ),
    )
