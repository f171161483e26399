"""
Study Assistant Container - Infrastructure Layer

Centralizes service instantiation and dependency injection.
Read-only configuration (curriculum, reference catalog) is loaded once and
shared by every consumer.
"""

from typing import Optional

from study_assistant.application.services.topic_content_service import TopicContentService
from study_assistant.application.use_cases.assistant_query_use_case import AssistantQueryUseCase
from study_assistant.application.use_cases.progress_use_case import RecordProgressUseCase
from study_assistant.core.settings import Settings, settings as default_settings
from study_assistant.domain.curriculum.catalog import CurriculumCatalog
from study_assistant.domain.navigation.controller import NavigationController
from study_assistant.domain.sourcing.catalog import ReferenceCatalog
from study_assistant.domain.sourcing.inference import (
    CurriculumTopicInference,
    NoSubjectInference,
    SubjectInferenceStrategy,
)
from study_assistant.domain.sourcing.policies import SourceSelectionEngine
from study_assistant.infrastructure.generation.text_generator import LangChainTextGenerator
from study_assistant.infrastructure.providers.curriculum_provider import build_navigation_provider
from study_assistant.infrastructure.repositories.in_memory import (
    InMemoryActivityRepository,
    InMemoryAssistantQueryRepository,
    InMemoryProgressRepository,
)


class AppContainer:
    """
    IoC Container for the study assistant services.
    """

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or default_settings
        # Lazy initialization of services
        self._curriculum = None
        self._reference_catalog = None
        self._subject_inference = None
        self._source_selection_engine = None
        self._topic_generator = None
        self._assistant_generator = None
        self._progress_repository = None
        self._activity_repository = None
        self._assistant_query_repository = None
        self._topic_content_service = None
        self._assistant_query_use_case = None
        self._record_progress_use_case = None

    @property
    def curriculum(self) -> CurriculumCatalog:
        if self._curriculum is None:
            self._curriculum = CurriculumCatalog.from_json(self._settings.CURRICULUM_PATH)
        return self._curriculum

    @property
    def reference_catalog(self) -> ReferenceCatalog:
        if self._reference_catalog is None:
            self._reference_catalog = ReferenceCatalog.from_json(self._settings.REFERENCE_CATALOG_PATH)
        return self._reference_catalog

    @property
    def subject_inference(self) -> SubjectInferenceStrategy:
        if self._subject_inference is None:
            if self._settings.SUBJECT_INFERENCE_MODE == "curriculum":
                self._subject_inference = CurriculumTopicInference(self.curriculum)
            else:
                self._subject_inference = NoSubjectInference()
        return self._subject_inference

    @property
    def source_selection_engine(self) -> SourceSelectionEngine:
        if self._source_selection_engine is None:
            self._source_selection_engine = SourceSelectionEngine(
                catalog=self.reference_catalog,
                subject_inference=self.subject_inference,
            )
        return self._source_selection_engine

    @property
    def topic_generator(self) -> LangChainTextGenerator:
        if self._topic_generator is None:
            self._topic_generator = LangChainTextGenerator(capability="TOPIC_CONTENT")
        return self._topic_generator

    @property
    def assistant_generator(self) -> LangChainTextGenerator:
        if self._assistant_generator is None:
            self._assistant_generator = LangChainTextGenerator(capability="ASSISTANT")
        return self._assistant_generator

    @property
    def progress_repository(self) -> InMemoryProgressRepository:
        if self._progress_repository is None:
            self._progress_repository = InMemoryProgressRepository()
        return self._progress_repository

    @property
    def activity_repository(self) -> InMemoryActivityRepository:
        if self._activity_repository is None:
            self._activity_repository = InMemoryActivityRepository()
        return self._activity_repository

    @property
    def assistant_query_repository(self) -> InMemoryAssistantQueryRepository:
        if self._assistant_query_repository is None:
            self._assistant_query_repository = InMemoryAssistantQueryRepository()
        return self._assistant_query_repository

    @property
    def topic_content_service(self) -> TopicContentService:
        if self._topic_content_service is None:
            self._topic_content_service = TopicContentService(
                curriculum=self.curriculum,
                generator=self.topic_generator,
                activities=self.activity_repository,
            )
        return self._topic_content_service

    @property
    def assistant_query_use_case(self) -> AssistantQueryUseCase:
        if self._assistant_query_use_case is None:
            self._assistant_query_use_case = AssistantQueryUseCase(
                engine=self.source_selection_engine,
                generator=self.assistant_generator,
                queries=self.assistant_query_repository,
                activities=self.activity_repository,
            )
        return self._assistant_query_use_case

    @property
    def record_progress_use_case(self) -> RecordProgressUseCase:
        if self._record_progress_use_case is None:
            self._record_progress_use_case = RecordProgressUseCase(
                curriculum=self.curriculum,
                progress=self.progress_repository,
                activities=self.activity_repository,
            )
        return self._record_progress_use_case

    def navigation_controller(self, learner_id: Optional[str] = None) -> NavigationController:
        """In-process navigator over this container's curriculum and repositories."""
        provider, notifier = build_navigation_provider(
            curriculum=self.curriculum,
            content_service=self.topic_content_service,
            learner_id=learner_id,
            progress_use_case=self.record_progress_use_case,
        )
        return NavigationController(provider=provider, notifier=notifier)
