"""
Drill-down navigation over the curriculum hierarchy.

The controller owns the current `Selection` and nothing else about the view:
the active view is always computed from it. Each level has at most one
in-flight fetch; starting a new one supersedes the previous, and responses
whose originating selection no longer matches are discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Optional, Sequence, Union

import structlog

from study_assistant.domain.content.sections import (
    TOPIC_CONTENT_MARKERS,
    SectionMarker,
    extract_sections,
    render_sections,
)
from study_assistant.domain.curriculum.models import SubjectRef, TopicContent, UnitRef
from study_assistant.domain.exceptions import GenerationError, NavigationError, NotReadyError
from study_assistant.domain.navigation.completion import CompletionTracker
from study_assistant.domain.navigation.models import (
    ALL_TERMS,
    CompletionRecord,
    FetchResult,
    Selection,
    TopicContentView,
    View,
)
from study_assistant.domain.navigation.ports import HierarchyProviderPort, ProgressNotifierPort

logger = structlog.get_logger(__name__)

GENERATION_FAILED_NOTICE = "Failed to generate content for this topic. Please try again."
LOAD_FAILED_NOTICE = "Failed to load {level}. Please try again."


class NavigationController:
    def __init__(
        self,
        provider: HierarchyProviderPort,
        notifier: Optional[ProgressNotifierPort] = None,
        tracker: Optional[CompletionTracker] = None,
        markers: Sequence[SectionMarker] = TOPIC_CONTENT_MARKERS,
    ):
        self._provider = provider
        self._notifier = notifier
        self._tracker = tracker if tracker is not None else CompletionTracker()
        self._markers = tuple(markers)
        self._selection = Selection()
        self._in_flight: dict[View, asyncio.Task[Any]] = {}
        self._applied: dict[View, tuple[tuple[Any, ...], Any]] = {}
        self._notifications: set[asyncio.Task[None]] = set()

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def view(self) -> View:
        return self._selection.view

    @property
    def tracker(self) -> CompletionTracker:
        return self._tracker

    # -- selection setters -------------------------------------------------

    def select_term(self, term_id: Union[int, str]) -> View:
        if isinstance(term_id, str) and term_id.strip().lower() == ALL_TERMS:
            return self.go_to_root()
        try:
            term = int(term_id)
        except (TypeError, ValueError) as exc:
            raise NavigationError(f"Invalid term identifier: {term_id!r}") from exc
        self._selection = Selection(term=term)
        return self.view

    def select_subject(self, subject: SubjectRef) -> View:
        if self._selection.term is None:
            raise NavigationError("Select a term before selecting a subject")
        self._selection = replace(self._selection.cleared_from("subject"), subject=subject)
        return self.view

    def select_unit(self, unit: UnitRef) -> View:
        if self._selection.subject is None:
            raise NavigationError("Select a subject before selecting a unit")
        self._selection = replace(self._selection.cleared_from("unit"), unit=unit)
        return self.view

    def select_topic(self, topic_index: int) -> View:
        if self._selection.unit is None:
            raise NavigationError("Select a unit before selecting a topic")
        if topic_index < 0:
            raise NavigationError(f"Topic index must be non-negative, got {topic_index}")
        self._selection = replace(self._selection, topic_index=topic_index)
        return self.view

    def go_back(self) -> View:
        deepest = self._selection.deepest_field()
        if deepest is not None:
            self._selection = self._selection.cleared_from(deepest)
        return self.view

    def go_to_root(self) -> View:
        self._selection = Selection()
        return self.view

    # -- completion ------------------------------------------------------

    def is_completed(self, subject_code: str, unit_number: int, topic_index: int) -> bool:
        return self._tracker.is_completed(CompletionRecord(subject_code, unit_number, topic_index))

    def mark_completed(self) -> bool:
        """
        Records the current topic as completed. Returns True when the record is
        new; only then is the progress notifier called. Inside a running event
        loop the notification runs in the background; outside one it runs to
        completion before this returns.
        """
        selection = self._selection
        missing = tuple(
            name for name in ("subject", "unit", "topic_index") if getattr(selection, name) is None
        )
        if missing:
            raise NotReadyError("A topic must be open to mark it completed", missing=missing)

        record = CompletionRecord(
            subject_code=selection.subject.code,
            unit_number=selection.unit.number,
            topic_index=selection.topic_index,
        )
        added = self._tracker.add(record)
        if added and self._notifier is not None:
            self._schedule_notification(record)
        return added

    def _schedule_notification(self, record: CompletionRecord) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._notify(record))
            return
        task = loop.create_task(self._notify(record))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _notify(self, record: CompletionRecord) -> None:
        try:
            await self._notifier.record_progress(
                record.subject_code, record.unit_number, record.topic_index
            )
        except Exception as exc:
            logger.warning(
                "progress_notification_failed",
                subject_code=record.subject_code,
                unit_number=record.unit_number,
                topic_index=record.topic_index,
                error=str(exc),
            )

    async def drain(self) -> None:
        """Waits for outstanding progress notifications."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    # -- data --------------------------------------------------------------

    def data(self, view: Optional[View] = None) -> Any:
        """Last applied payload for `view`, if it still matches the selection."""
        level = view or self.view
        applied = self._applied.get(level)
        if applied is None:
            return None
        key, payload = applied
        return payload if key == self._selection.key_for(level) else None

    async def fetch(self, view: Optional[View] = None) -> FetchResult:
        level = view or self.view
        snapshot = self._selection
        missing = snapshot.missing_for(level)
        if missing:
            logger.info("navigation_fetch_not_ready", view=level.value, missing=list(missing))
            return FetchResult(view=level, status="not_ready", selection=snapshot, missing=missing)

        previous = self._in_flight.get(level)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(self._load(level, snapshot))
        self._in_flight[level] = task
        try:
            payload = await task
        except asyncio.CancelledError:
            if self._in_flight.get(level) is not task:
                logger.info("navigation_fetch_stale", view=level.value, reason="superseded")
                return FetchResult(view=level, status="stale", selection=snapshot)
            raise
        except GenerationError as exc:
            logger.warning("navigation_fetch_failed", view=level.value, error=exc.message)
            return FetchResult(
                view=level, status="failed", selection=snapshot, error=GENERATION_FAILED_NOTICE
            )
        except Exception as exc:
            logger.warning("navigation_fetch_failed", view=level.value, error=str(exc))
            return FetchResult(
                view=level,
                status="failed",
                selection=snapshot,
                error=LOAD_FAILED_NOTICE.format(level=level.value),
            )
        finally:
            if self._in_flight.get(level) is task:
                del self._in_flight[level]

        key = snapshot.key_for(level)
        if key != self._selection.key_for(level):
            logger.info("navigation_fetch_stale", view=level.value, reason="selection_changed")
            return FetchResult(view=level, status="stale", selection=snapshot)

        if level is View.CONTENT:
            payload = self._render_content(payload)
        self._applied[level] = (key, payload)
        return FetchResult(view=level, status="ok", selection=snapshot, payload=payload)

    async def _load(self, level: View, snapshot: Selection) -> Any:
        if level is View.SEMESTERS:
            return await self._provider.list_terms()
        if level is View.SUBJECTS:
            return await self._provider.list_subjects(snapshot.term)
        if level is View.UNITS:
            return await self._provider.list_units(snapshot.subject.code)
        if level is View.TOPICS:
            return await self._provider.list_topics(snapshot.subject.code, snapshot.unit.number)
        return await self._provider.get_topic_content(
            snapshot.subject.code, snapshot.unit.number, snapshot.topic_index
        )

    def _render_content(self, content: TopicContent) -> TopicContentView:
        sections = render_sections(extract_sections(content.content, self._markers))
        return TopicContentView(
            subject=content.subject,
            unit=content.unit,
            topic=content.topic,
            content=content.content,
            sections=sections,
        )
