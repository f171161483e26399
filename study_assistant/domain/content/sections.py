"""
Marker-based splitting of a generated document into named sections.

Every marker is matched independently against the original text: the first
occurrence of its start token wins, and its content stops at its own end
token, at any other marker's start token, or at end-of-text, whichever comes
first. A missing start token yields an empty section.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from study_assistant.domain.content.markup import normalize_markup

MISSING_SECTION_PLACEHOLDER = "This section is not available for this topic."


@dataclass(frozen=True)
class SectionMarker:
    name: str
    start_token: str
    end_token: Optional[str] = None


SectionMap = dict[str, str]


TOPIC_CONTENT_MARKERS: tuple[SectionMarker, ...] = (
    SectionMarker(
        name="Detailed Explanation",
        start_token="**1. 📘 Detailed Explanation**",
        end_token="**2. 🧮 Key Formulas**",
    ),
    SectionMarker(
        name="Key Formulas",
        start_token="**2. 🧮 Key Formulas**",
        end_token="**3. 🖼️ Visuals & Diagrams**",
    ),
    SectionMarker(
        name="Visuals & Diagrams",
        start_token="**3. 🖼️ Visuals & Diagrams**",
        end_token="**4. 🔗 IEEE Paper References**",
    ),
    SectionMarker(
        name="IEEE Paper References",
        start_token="**4. 🔗 IEEE Paper References**",
        end_token="**5. 🧩 Prerequisite & Related Topics**",
    ),
    SectionMarker(
        name="Prerequisite & Related Topics",
        start_token="**5. 🧩 Prerequisite & Related Topics**",
        end_token=None,
    ),
)

ASSISTANT_ANSWER_MARKERS: tuple[SectionMarker, ...] = (
    SectionMarker(name="Overview", start_token="### Overview", end_token="### Explanation"),
    SectionMarker(name="Explanation", start_token="### Explanation", end_token="### Key Formulas"),
    SectionMarker(name="Key Formulas", start_token="### Key Formulas", end_token="### Examples"),
    SectionMarker(name="Examples", start_token="### Examples", end_token="### Recommended Resources"),
    SectionMarker(
        name="Recommended Resources",
        start_token="### Recommended Resources",
        end_token="### References",
    ),
    SectionMarker(name="References", start_token="### References", end_token=None),
)


def extract_sections(raw_text: str, markers: Sequence[SectionMarker]) -> SectionMap:
    text = raw_text or ""
    sections: SectionMap = {}
    for marker in markers:
        start = text.find(marker.start_token) if marker.start_token else -1
        if start < 0:
            sections[marker.name] = ""
            continue

        content_start = start + len(marker.start_token)
        stops: list[int] = []
        if marker.end_token:
            end = text.find(marker.end_token, content_start)
            if end >= 0:
                stops.append(end)
        for other in markers:
            if other is marker or not other.start_token or other.start_token == marker.start_token:
                continue
            position = text.find(other.start_token, content_start)
            if position >= 0:
                stops.append(position)

        content_end = min(stops) if stops else len(text)
        sections[marker.name] = text[content_start:content_end].strip()
    return sections


def render_sections(
    sections: Mapping[str, str],
    placeholder: str = MISSING_SECTION_PLACEHOLDER,
) -> SectionMap:
    """Normalizes each section; empty ones get the fixed placeholder."""
    rendered: SectionMap = {}
    for name, value in sections.items():
        if not str(value or "").strip():
            rendered[name] = placeholder
            continue
        rendered[name] = normalize_markup(value)
    return rendered
