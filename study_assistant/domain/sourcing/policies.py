"""
Source selection: which references an answer cites and whether open internet
lookup is allowed, decided from which optional query parameters are present.
"""

from __future__ import annotations

from typing import Optional

import structlog

from study_assistant.domain.sourcing.catalog import ReferenceCatalog
from study_assistant.domain.sourcing.inference import NoSubjectInference, SubjectInferenceStrategy
from study_assistant.domain.sourcing.models import ContentQuery, ReferenceScope, SourcePlan

logger = structlog.get_logger(__name__)

GENERIC_CITATION = "General ECE curriculum references"

RESOURCES_ONLY_CLAUSE = (
    "Internet access is granted only for supplementary resource recommendations, "
    "not for answering the core question."
)

# (knowledge_level, subject, reference) presence -> (allow_internet, scope, rationale)
_DECISION_TABLE: dict[tuple[bool, bool, bool], tuple[bool, ReferenceScope, str]] = {
    (True, True, True): (
        True,
        ReferenceScope.SPECIFIC_REFERENCE,
        "Using Internet + Specific book: This allows for comprehensive answers with textbook accuracy.",
    ),
    (True, True, False): (
        True,
        ReferenceScope.ALL_REFERENCES_IN_SUBJECT,
        "Using Internet + All books from selected subject: Providing broad curriculum coverage.",
    ),
    (True, False, True): (
        True,
        ReferenceScope.ALL_REFERENCES,
        "Using Internet + All available books: Drawing from full knowledge base.",
    ),
    (True, False, False): (
        True,
        ReferenceScope.ALL_REFERENCES,
        "Using Internet + All available books: Drawing from full knowledge base.",
    ),
    (False, True, True): (
        False,
        ReferenceScope.SPECIFIC_REFERENCE,
        "Using only the selected book (no internet): Ensuring answers follow textbook exactly.",
    ),
    (False, True, False): (
        False,
        ReferenceScope.ALL_REFERENCES_IN_SUBJECT,
        "Using all books under selected subject (no internet): Following curriculum strictly.",
    ),
    (False, False, True): (
        False,
        ReferenceScope.SPECIFIC_REFERENCE,
        "Using only the selected book (no internet): Providing textbook-accurate responses.",
    ),
    (False, False, False): (
        False,
        ReferenceScope.TOPIC_INFERRED_SUBJECT_REFERENCES,
        "Using books related to the topic's subject: Selecting relevant curriculum materials.",
    ),
}


class SourceSelectionEngine:
    def __init__(
        self,
        catalog: ReferenceCatalog,
        subject_inference: Optional[SubjectInferenceStrategy] = None,
    ):
        self._catalog = catalog
        self._subject_inference = subject_inference or NoSubjectInference()

    def decide(self, query: ContentQuery) -> SourcePlan:
        key = (
            query.knowledge_level is not None,
            query.subject is not None,
            query.reference is not None,
        )
        allow_internet, scope, rationale = _DECISION_TABLE[key]

        resources_override = False
        if query.include_resources and not allow_internet:
            allow_internet = True
            resources_override = True
            rationale = f"{rationale} {RESOURCES_ONLY_CLAUSE}"

        citations = self._resolve_citations(scope, query) or (GENERIC_CITATION,)
        return SourcePlan(
            allow_internet=allow_internet,
            reference_scope=scope,
            citations=citations,
            rationale=rationale,
            resources_override=resources_override,
        )

    def _resolve_citations(self, scope: ReferenceScope, query: ContentQuery) -> tuple[str, ...]:
        if scope is ReferenceScope.SPECIFIC_REFERENCE:
            reference = self._catalog.find(query.reference or "", subject=query.subject)
            if reference is not None:
                return (reference.citation,)
            return (query.reference,) if query.reference else ()

        if scope is ReferenceScope.ALL_REFERENCES_IN_SUBJECT:
            return tuple(ref.citation for ref in self._catalog.references_for(query.subject))

        if scope is ReferenceScope.ALL_REFERENCES:
            return tuple(dict.fromkeys(ref.citation for ref in self._catalog.all_references()))

        inferred = self._subject_inference.infer(query.topic)
        if inferred is None:
            logger.debug("subject_inference_unresolved", topic=query.topic)
            return ()
        return tuple(ref.citation for ref in self._catalog.references_for(inferred))
