from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

from study_assistant.domain.sourcing.models import Reference


@dataclass(frozen=True)
class SubjectReferences:
    code: str
    name: str
    references: tuple[Reference, ...]


class ReferenceCatalog:
    """Read-only mapping of subject code to its ordered references."""

    def __init__(self, subjects: tuple[SubjectReferences, ...]):
        self._subjects = subjects
        self._by_code = {entry.code.upper(): entry for entry in subjects}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ReferenceCatalog":
        raw_subjects = payload.get("subjects") if isinstance(payload, dict) else None
        if not isinstance(raw_subjects, list):
            raise ValueError("Reference catalog payload must contain a 'subjects' list")
        subjects = tuple(
            SubjectReferences(
                code=str(raw["code"]).strip(),
                name=str(raw.get("name") or "").strip(),
                references=tuple(
                    Reference(
                        title=str(ref["title"]).strip(),
                        authors=str(ref.get("authors") or "").strip(),
                    )
                    for ref in raw.get("references") or []
                ),
            )
            for raw in raw_subjects
        )
        return cls(subjects)

    @classmethod
    def from_json(cls, path: str | Path) -> "ReferenceCatalog":
        with Path(path).open("r", encoding="utf-8") as fp:
            return cls.from_dict(json.load(fp))

    @property
    def subjects(self) -> tuple[SubjectReferences, ...]:
        return self._subjects

    def has_subject(self, code: Optional[str]) -> bool:
        return bool(code) and str(code).upper() in self._by_code

    def references_for(self, code: Optional[str]) -> tuple[Reference, ...]:
        entry = self._by_code.get(str(code or "").upper())
        return entry.references if entry else ()

    def all_references(self) -> Iterator[Reference]:
        for entry in self._subjects:
            yield from entry.references

    def find(self, title: str, subject: Optional[str] = None) -> Optional[Reference]:
        """Case-insensitive title lookup, in `subject` first and then everywhere."""
        wanted = str(title or "").strip().casefold()
        if not wanted:
            return None
        for reference in self.references_for(subject):
            if reference.title.casefold() == wanted:
                return reference
        for reference in self.all_references():
            if reference.title.casefold() == wanted:
                return reference
        return None
