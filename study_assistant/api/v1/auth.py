from __future__ import annotations

import structlog
from fastapi import Depends, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from study_assistant.api.v1.errors import ApiError
from study_assistant.core.middleware.learner_context import LEARNER_ID_HEADER, LEARNER_ID_PATTERN
from study_assistant.core.settings import settings

logger = structlog.get_logger(__name__)

bearer_auth = HTTPBearer(
    auto_error=False,
    scheme_name="BearerAuth",
    description="Authorization Bearer token. Use SERVICE_SECRET as token value.",
)
service_secret_auth = APIKeyHeader(
    name="X-Service-Secret",
    auto_error=False,
    scheme_name="ServiceSecretAuth",
    description="Service secret header for calls from the web tier.",
)
learner_header_auth = APIKeyHeader(
    name=LEARNER_ID_HEADER,
    auto_error=False,
    scheme_name="LearnerIdentity",
    description="Authenticated learner identifier forwarded by the web tier.",
)


async def require_service_auth(
    bearer_credentials: HTTPAuthorizationCredentials | None = Security(bearer_auth),
    x_service_secret: str | None = Security(service_secret_auth),
) -> None:
    """
    Enforces API auth only in deployed environments.
    Accepts either Bearer token or X-Service-Secret using the SERVICE_SECRET value.
    """
    expected = str(settings.SERVICE_SECRET or "").strip()
    if not settings.is_deployed_environment:
        logger.debug(
            "service_auth_bypass",
            auth_mode="local_bypass",
            service_secret_configured=bool(expected and expected != "development-secret"),
        )
        return

    if not expected or expected == "development-secret":
        raise ApiError(
            status_code=500,
            code="AUTH_MISCONFIGURED",
            message="Service secret must be configured in deployed environments",
        )

    bearer = None
    if bearer_credentials and str(bearer_credentials.scheme or "").lower() == "bearer":
        bearer = (bearer_credentials.credentials or "").strip() or None
    header_secret = x_service_secret.strip() if x_service_secret else None
    candidate = bearer or header_secret
    caller_auth_mode = "bearer" if bearer else ("x_service_secret" if header_secret else "missing")

    if candidate != expected:
        logger.warning("service_auth_failed", caller_auth_mode=caller_auth_mode)
        raise ApiError(
            status_code=401,
            code="UNAUTHORIZED",
            message="Unauthorized",
            details="Missing or invalid service token",
        )


async def optional_learner(learner_id: str | None = Security(learner_header_auth)) -> str | None:
    value = str(learner_id or "").strip()
    if not value or not LEARNER_ID_PATTERN.fullmatch(value):
        return None
    return value


async def require_learner(learner_id: str | None = Depends(optional_learner)) -> str:
    if not learner_id:
        raise ApiError(
            status_code=401,
            code="UNAUTHORIZED",
            message="Unauthorized",
            details="Missing learner identity",
        )
    return learner_id
