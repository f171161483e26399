from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Literal, Optional

from study_assistant.domain.curriculum.models import SubjectRef, UnitRef

ALL_TERMS = "all"


class View(str, Enum):
    SEMESTERS = "semesters"
    SUBJECTS = "subjects"
    UNITS = "units"
    TOPICS = "topics"
    CONTENT = "content"


# Selection fields each view's fetch is keyed by, in hierarchy order.
REQUIRED_FIELDS: dict[View, tuple[str, ...]] = {
    View.SEMESTERS: (),
    View.SUBJECTS: ("term",),
    View.UNITS: ("term", "subject"),
    View.TOPICS: ("term", "subject", "unit"),
    View.CONTENT: ("term", "subject", "unit", "topic_index"),
}

HIERARCHY: tuple[str, ...] = ("term", "subject", "unit", "topic_index")


@dataclass(frozen=True)
class Selection:
    term: Optional[int] = None
    subject: Optional[SubjectRef] = None
    unit: Optional[UnitRef] = None
    topic_index: Optional[int] = None

    def is_consistent(self) -> bool:
        seen_empty = False
        for name in HIERARCHY:
            populated = getattr(self, name) is not None
            if populated and seen_empty:
                return False
            if not populated:
                seen_empty = True
        return True

    @property
    def view(self) -> View:
        if self.topic_index is not None and self.unit is not None and self.subject is not None:
            return View.CONTENT
        if self.unit is not None and self.subject is not None:
            return View.TOPICS
        if self.subject is not None:
            return View.UNITS
        if self.term is not None:
            return View.SUBJECTS
        return View.SEMESTERS

    def deepest_field(self) -> Optional[str]:
        for name in reversed(HIERARCHY):
            if getattr(self, name) is not None:
                return name
        return None

    def cleared_from(self, name: str) -> "Selection":
        """Returns a copy with `name` and every field below it emptied."""
        index = HIERARCHY.index(name)
        return replace(self, **{field: None for field in HIERARCHY[index:]})

    def missing_for(self, view: View) -> tuple[str, ...]:
        return tuple(name for name in REQUIRED_FIELDS[view] if getattr(self, name) is None)

    def key_for(self, view: View) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in REQUIRED_FIELDS[view])


@dataclass(frozen=True)
class CompletionRecord:
    subject_code: str
    unit_number: int
    topic_index: int


FetchStatus = Literal["ok", "not_ready", "stale", "failed"]


@dataclass(frozen=True)
class FetchResult:
    view: View
    status: FetchStatus
    selection: Selection
    payload: Any = None
    missing: tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass(frozen=True)
class TopicContentView:
    """CONTENT-level payload after section extraction and normalization."""

    subject: str
    unit: str
    topic: str
    content: str
    sections: dict[str, str]
