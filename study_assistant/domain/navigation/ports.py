from __future__ import annotations

from typing import Protocol

from study_assistant.domain.curriculum.models import (
    SubjectRef,
    TermSummary,
    TopicContent,
    TopicListing,
    UnitRef,
)


class HierarchyProviderPort(Protocol):
    async def list_terms(self) -> list[TermSummary]: ...

    async def list_subjects(self, term: int) -> list[SubjectRef]: ...

    async def list_units(self, subject_code: str) -> list[UnitRef]: ...

    async def list_topics(self, subject_code: str, unit_number: int) -> TopicListing: ...

    async def get_topic_content(
        self, subject_code: str, unit_number: int, topic_index: int
    ) -> TopicContent: ...


class ProgressNotifierPort(Protocol):
    async def record_progress(self, subject_code: str, unit_number: int, topic_index: int) -> None: ...
