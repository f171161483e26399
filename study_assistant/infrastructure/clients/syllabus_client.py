from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from study_assistant.core.observability.correlation import CORRELATION_ID_HEADER, correlation_id_ctx
from study_assistant.core.settings import settings
from study_assistant.domain.curriculum.models import (
    SubjectRef,
    TermSummary,
    TopicContent,
    TopicListing,
    UnitRef,
)
from study_assistant.domain.exceptions import GenerationError


@dataclass
class SyllabusApiError(Exception):
    status: int
    code: str
    message: str
    details: Any
    request_id: str

    def __str__(self) -> str:
        return f"[{self.status}] {self.code}: {self.message} (request_id={self.request_id})"


def _raise_from_http_error(status_code: int, response_text: str, response_headers: Dict[str, str], payload: Any) -> None:
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        error = {
            "code": "UNPARSEABLE_ERROR",
            "message": response_text,
            "details": None,
            "request_id": response_headers.get("X-Correlation-ID", "unknown"),
        }

    code = str(error.get("code") or "UNKNOWN_ERROR")
    message = str(error.get("message") or "Request failed")
    if code == "GENERATION_FAILED":
        raise GenerationError(message, transient=status_code >= 500, cause=code)

    raise SyllabusApiError(
        status=status_code,
        code=code,
        message=message,
        details=error.get("details"),
        request_id=str(error.get("request_id") or response_headers.get("X-Correlation-ID") or "unknown"),
    )


class AsyncSyllabusClient:
    """
    HTTP client for the syllabus endpoints. Serves as the navigation
    controller's hierarchy provider and progress notifier.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        learner_id: Optional[str] = None,
        service_secret: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.SYLLABUS_API_URL).rstrip("/")
        self.learner_id = learner_id
        self.service_secret = service_secret
        self.timeout_seconds = float(timeout_seconds or settings.SYLLABUS_API_TIMEOUT_SECONDS)
        self._managed_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.timeout_seconds)

    async def __aenter__(self) -> "AsyncSyllabusClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._managed_client:
            await self.client.aclose()

    async def list_terms(self) -> list[TermSummary]:
        payload = await self._request("GET", "/syllabus/terms")
        return [TermSummary(term=int(item["term"]), subject_count=int(item["subject_count"])) for item in payload]

    async def list_subjects(self, term: int) -> list[SubjectRef]:
        payload = await self._request("GET", f"/syllabus/terms/{term}/subjects")
        return [SubjectRef(code=str(item["code"]), name=str(item["name"])) for item in payload]

    async def list_units(self, subject_code: str) -> list[UnitRef]:
        payload = await self._request("GET", f"/syllabus/subjects/{subject_code}/units")
        return [UnitRef(number=int(item["number"]), title=str(item["title"])) for item in payload]

    async def list_topics(self, subject_code: str, unit_number: int) -> TopicListing:
        payload = await self._request("GET", f"/syllabus/subjects/{subject_code}/units/{unit_number}/topics")
        return TopicListing(title=str(payload["title"]), topics=tuple(str(t) for t in payload["topics"]))

    async def get_topic_content(self, subject_code: str, unit_number: int, topic_index: int) -> TopicContent:
        payload = await self._request(
            "GET",
            f"/syllabus/subjects/{subject_code}/units/{unit_number}/topics/{topic_index}/content",
        )
        return TopicContent(
            subject=str(payload["subject"]),
            unit=str(payload["unit"]),
            topic=str(payload["topic"]),
            content=str(payload["content"]),
        )

    async def record_progress(self, subject_code: str, unit_number: int, topic_index: int) -> None:
        await self._request(
            "POST",
            "/syllabus/progress",
            json_body={"code": subject_code, "unit": unit_number, "topic": topic_index},
        )

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            headers[CORRELATION_ID_HEADER] = correlation_id
        if self.learner_id:
            headers["X-Learner-ID"] = self.learner_id
        if self.service_secret:
            headers["Authorization"] = f"Bearer {self.service_secret}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        response = await self.client.request(
            method=method,
            url=url,
            headers=self._headers(),
            params=params,
            json=json_body,
        )

        if response.is_success:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None
        _raise_from_http_error(response.status_code, response.text, dict(response.headers), payload)
