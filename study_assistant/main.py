from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse

from study_assistant.api.v1.api_router import v1_router
from study_assistant.api.v1.errors import (
    ApiError,
    api_error_exception_handler,
    curriculum_lookup_exception_handler,
    error_envelope,
    generation_exception_handler,
)
from study_assistant.core.middleware.learner_context import LearnerContextMiddleware
from study_assistant.core.observability.correlation import CorrelationMiddleware
from study_assistant.core.observability.logger_config import configure_structlog
from study_assistant.core.settings import settings
from study_assistant.domain.exceptions import CurriculumLookupError, GenerationError
from study_assistant.infrastructure.container import AppContainer

# Configure Structlog (JSON Logging)
configure_structlog()
logger = structlog.get_logger(__name__)
logger.info(
    "auth_runtime_mode",
    auth_mode="deployed" if settings.is_deployed_environment else "local_bypass",
    service_secret_configured=bool(
        str(settings.SERVICE_SECRET or "").strip()
        and str(settings.SERVICE_SECRET).strip() != "development-secret"
    ),
    app_env=settings.APP_ENV,
    environment=settings.ENVIRONMENT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = AppContainer()
    app.state.container = container
    curriculum = container.curriculum
    catalog = container.reference_catalog
    logger.info(
        "configuration_loaded",
        terms=len(curriculum.terms),
        reference_subjects=len(catalog.subjects),
        subject_inference=settings.SUBJECT_INFERENCE_MODE,
    )
    yield


app = FastAPI(
    title="Syllabus Navigator and Academic Assistant API",
    description="Curriculum navigation, topic content generation and source-aware academic answers.",
    version="1.0.0",
    lifespan=lifespan,
)


# Register Middleware (Stack order: Last added runs FIRST)

# 2. Learner Context Middleware (Inner)
app.add_middleware(LearnerContextMiddleware)

# 1. Correlation Middleware (Outer) - Generates/Extracts Request ID
app.add_middleware(CorrelationMiddleware)


def _compact_validation_errors(errors: Any) -> list[dict[str, Any]]:
    return [
        {
            "loc": list(error.get("loc") or []),
            "msg": str(error.get("msg") or ""),
            "type": str(error.get("type") or ""),
        }
        for error in errors
    ]


@app.exception_handler(ResponseValidationError)
async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    """
    Handles errors when the backend fails to match the output contract (response_model).
    """
    details = _compact_validation_errors(exc.errors())
    logger.error(
        "backend_contract_breach",
        type="contract_violation",
        direction="outbound_backend",
        endpoint=str(request.url),
        validation_errors=details,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("BACKEND_CONTRACT_BREACH", "Internal Server Error: Data Contract Breach", details),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handles errors when the incoming data doesn't match the input contract.
    Malformed progress or query payloads end here without any state change.
    """
    details = _compact_validation_errors(exc.errors())
    logger.warning(
        "frontend_contract_breach",
        type="contract_violation",
        direction="inbound_backend",
        endpoint=str(request.url),
        validation_errors=details,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope("FRONTEND_CONTRACT_BREACH", "Request validation failed", details),
    )


app.add_exception_handler(ApiError, api_error_exception_handler)
app.add_exception_handler(CurriculumLookupError, curriculum_lookup_exception_handler)
app.add_exception_handler(GenerationError, generation_exception_handler)

# Include Modular Routers
app.include_router(v1_router)


@app.get("/health")
def health_check():
    """
    Service health check.
    """
    return {"status": "ok", "service": "study-assistant", "api_v1": "available"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.API_PORT)
