from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SubjectRef:
    code: str
    name: str


@dataclass(frozen=True)
class UnitRef:
    number: int
    title: str


@dataclass(frozen=True)
class Unit:
    number: int
    title: str
    topics: tuple[str, ...] = ()

    def ref(self) -> UnitRef:
        return UnitRef(number=self.number, title=self.title)


@dataclass(frozen=True)
class Subject:
    code: str
    name: str
    units: tuple[Unit, ...] = ()

    def ref(self) -> SubjectRef:
        return SubjectRef(code=self.code, name=self.name)


@dataclass(frozen=True)
class Term:
    number: int
    subjects: tuple[Subject, ...] = ()


@dataclass(frozen=True)
class TermSummary:
    term: int
    subject_count: int


@dataclass(frozen=True)
class TopicListing:
    title: str
    topics: tuple[str, ...]


@dataclass(frozen=True)
class TopicLocation:
    subject: Subject
    unit: Unit
    topic_index: int

    @property
    def topic(self) -> str:
        return self.unit.topics[self.topic_index]


@dataclass(frozen=True)
class TopicContent:
    """Raw generated content for one topic, before section extraction."""

    subject: str
    unit: str
    topic: str
    content: str
