import re

import structlog
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from study_assistant.core.observability.context_vars import bind_context, learner_id_ctx
from study_assistant.core.observability.correlation import get_correlation_id

LEARNER_ID_HEADER = "X-Learner-ID"
EXEMPT_PATHS = {"/health", "/openapi.json"}
LEARNER_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@-]{0,127}$")

logger = structlog.get_logger(__name__)


class LearnerContextMiddleware(BaseHTTPMiddleware):
    """
    Extracts the learner identity forwarded by the web tier and makes it
    available via ContextVars and the structlog context.
    The header is optional here; routes that mutate state enforce it.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in EXEMPT_PATHS or path.startswith("/docs"):
            return await call_next(request)

        learner_norm = str(request.headers.get(LEARNER_ID_HEADER) or "").strip()
        if not learner_norm:
            return await call_next(request)

        if not LEARNER_ID_PATTERN.fullmatch(learner_norm):
            return JSONResponse(
                status_code=400,
                content={
                    "error": {
                        "code": "INVALID_LEARNER_HEADER",
                        "message": "Invalid learner context",
                        "details": f"Invalid {LEARNER_ID_HEADER} header format",
                        "request_id": get_correlation_id(),
                    }
                },
            )

        bind_context(learner_id=learner_norm)
        logger.debug("learner_context_bound", request_path=path, request_method=request.method)

        token = learner_id_ctx.set(learner_norm)
        try:
            return await call_next(request)
        finally:
            learner_id_ctx.reset(token)
