from __future__ import annotations

from typing import Optional

from study_assistant.application.services.topic_content_service import TopicContentService
from study_assistant.application.use_cases.progress_use_case import (
    RecordProgressCommand,
    RecordProgressUseCase,
)
from study_assistant.domain.curriculum.catalog import CurriculumCatalog
from study_assistant.domain.curriculum.models import (
    SubjectRef,
    TermSummary,
    TopicContent,
    TopicListing,
    UnitRef,
)


class InProcessHierarchyProvider:
    """Hierarchy provider backed directly by the curriculum catalog."""

    def __init__(self, curriculum: CurriculumCatalog, content_service: TopicContentService):
        self._curriculum = curriculum
        self._content_service = content_service

    async def list_terms(self) -> list[TermSummary]:
        return self._curriculum.list_terms()

    async def list_subjects(self, term: int) -> list[SubjectRef]:
        return [subject.ref() for subject in self._curriculum.get_term(term).subjects]

    async def list_units(self, subject_code: str) -> list[UnitRef]:
        return [unit.ref() for unit in self._curriculum.get_subject(subject_code).units]

    async def list_topics(self, subject_code: str, unit_number: int) -> TopicListing:
        return self._curriculum.list_topics(subject_code, unit_number)

    async def get_topic_content(self, subject_code: str, unit_number: int, topic_index: int) -> TopicContent:
        return await self._content_service.get_topic_content(subject_code, unit_number, topic_index)


class UseCaseProgressNotifier:
    """Progress notifier that records completions through the progress use case."""

    def __init__(self, use_case: RecordProgressUseCase, learner_id: str):
        self._use_case = use_case
        self._learner_id = learner_id

    async def record_progress(self, subject_code: str, unit_number: int, topic_index: int) -> None:
        await self._use_case.execute(
            RecordProgressCommand(
                learner_id=self._learner_id,
                subject_code=subject_code,
                unit_number=unit_number,
                topic_index=topic_index,
            )
        )


def build_navigation_provider(
    curriculum: CurriculumCatalog,
    content_service: TopicContentService,
    learner_id: Optional[str] = None,
    progress_use_case: Optional[RecordProgressUseCase] = None,
) -> tuple[InProcessHierarchyProvider, Optional[UseCaseProgressNotifier]]:
    provider = InProcessHierarchyProvider(curriculum, content_service)
    notifier = None
    if learner_id and progress_use_case is not None:
        notifier = UseCaseProgressNotifier(progress_use_case, learner_id)
    return provider, notifier
