from __future__ import annotations

import json

import httpx
import pytest

from study_assistant.domain.curriculum.models import SubjectRef, TopicListing, UnitRef
from study_assistant.domain.exceptions import GenerationError
from study_assistant.infrastructure.clients.syllabus_client import AsyncSyllabusClient, SyllabusApiError


def _error(status: int, code: str, message: str, details=None) -> httpx.Response:
    return httpx.Response(
        status,
        json={"error": {"code": code, "message": message, "details": details, "request_id": "req-1"}},
    )


class _Backend:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/v1/syllabus/terms":
            return httpx.Response(200, json=[{"term": 1, "subject_count": 5}, {"term": 2, "subject_count": 7}])
        if path == "/api/v1/syllabus/terms/2/subjects":
            return httpx.Response(200, json=[{"code": "EC3251", "name": "CIRCUIT ANALYSIS"}])
        if path == "/api/v1/syllabus/terms/9/subjects":
            return _error(404, "TERM_NOT_FOUND", "Term 9 not found", {"level": "term"})
        if path == "/api/v1/syllabus/subjects/EC3251/units":
            return httpx.Response(200, json=[{"number": 1, "title": "DC CIRCUIT ANALYSIS"}])
        if path == "/api/v1/syllabus/subjects/EC3251/units/1/topics":
            return httpx.Response(200, json={"title": "DC CIRCUIT ANALYSIS", "topics": ["Ohms Law", "Mesh analysis"]})
        if path == "/api/v1/syllabus/subjects/EC3251/units/1/topics/0/content":
            return httpx.Response(
                200,
                json={
                    "subject": "CIRCUIT ANALYSIS",
                    "unit": "DC CIRCUIT ANALYSIS",
                    "topic": "Ohms Law",
                    "content": "**1. 📘 Detailed Explanation**\nText",
                },
            )
        if path == "/api/v1/syllabus/subjects/EC3251/units/1/topics/1/content":
            return _error(502, "GENERATION_FAILED", "Error generating content", {"transient": True, "attempts": 2})
        if path == "/api/v1/syllabus/progress":
            return httpx.Response(200, json={"message": "Progress saved successfully", "created": True})
        return httpx.Response(500, text="boom")


def _client(backend: _Backend, **kwargs) -> AsyncSyllabusClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    return AsyncSyllabusClient(base_url="http://syllabus.test/", client=http, **kwargs)


@pytest.mark.asyncio
async def test_hierarchy_reads_are_mapped_to_domain_types() -> None:
    backend = _Backend()
    client = _client(backend)

    terms = await client.list_terms()
    subjects = await client.list_subjects(2)
    units = await client.list_units("EC3251")
    topics = await client.list_topics("EC3251", 1)
    content = await client.get_topic_content("EC3251", 1, 0)

    assert [t.term for t in terms] == [1, 2]
    assert subjects == [SubjectRef(code="EC3251", name="CIRCUIT ANALYSIS")]
    assert units == [UnitRef(number=1, title="DC CIRCUIT ANALYSIS")]
    assert topics == TopicListing(title="DC CIRCUIT ANALYSIS", topics=("Ohms Law", "Mesh analysis"))
    assert content.topic == "Ohms Law"
    assert str(backend.requests[0].url) == "http://syllabus.test/api/v1/syllabus/terms"


@pytest.mark.asyncio
async def test_identity_headers_are_forwarded() -> None:
    backend = _Backend()
    client = _client(backend, learner_id="learner-7", service_secret="s3cret")

    await client.list_terms()

    headers = backend.requests[0].headers
    assert headers["X-Learner-ID"] == "learner-7"
    assert headers["Authorization"] == "Bearer s3cret"


@pytest.mark.asyncio
async def test_record_progress_posts_the_triple() -> None:
    backend = _Backend()
    client = _client(backend, learner_id="learner-7")

    await client.record_progress("EC3251", 1, 3)

    request = backend.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == {"code": "EC3251", "unit": 1, "topic": 3}


@pytest.mark.asyncio
async def test_error_envelope_becomes_api_error() -> None:
    client = _client(_Backend())

    with pytest.raises(SyllabusApiError) as exc_info:
        await client.list_subjects(9)

    assert exc_info.value.status == 404
    assert exc_info.value.code == "TERM_NOT_FOUND"
    assert exc_info.value.details == {"level": "term"}
    assert exc_info.value.request_id == "req-1"


@pytest.mark.asyncio
async def test_generation_failure_is_raised_as_generation_error() -> None:
    client = _client(_Backend())

    with pytest.raises(GenerationError) as exc_info:
        await client.get_topic_content("EC3251", 1, 1)

    assert exc_info.value.transient is True


@pytest.mark.asyncio
async def test_unparseable_error_body_is_reported() -> None:
    client = _client(_Backend())

    with pytest.raises(SyllabusApiError) as exc_info:
        await client.list_units("XX0000")

    assert exc_info.value.status == 500
    assert exc_info.value.code == "UNPARSEABLE_ERROR"
    assert exc_info.value.message == "boom"


@pytest.mark.asyncio
async def test_managed_client_is_closed_on_exit() -> None:
    async with AsyncSyllabusClient(base_url="http://syllabus.test") as client:
        http = client.client
    assert http.is_closed
