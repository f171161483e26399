from __future__ import annotations

import pytest

from study_assistant.core.settings import settings
from study_assistant.domain.curriculum.catalog import CurriculumCatalog
from study_assistant.domain.exceptions import CurriculumLookupError
from study_assistant.domain.sourcing.catalog import ReferenceCatalog
from study_assistant.domain.sourcing.inference import CurriculumTopicInference, NoSubjectInference


def _small_curriculum() -> CurriculumCatalog:
    return CurriculumCatalog.from_dict(
        {
            "terms": [
                {
                    "term": 2,
                    "subjects": [
                        {
                            "code": "EC3251",
                            "name": "CIRCUIT ANALYSIS",
                            "units": [
                                {
                                    "number": 2,
                                    "title": "NETWORK THEOREM AND DUALITY",
                                    "topics": ["Thevenin and Norton Equivalent Circuits", "Maximum Power Transfer"],
                                }
                            ],
                        },
                        {
                            "code": "PH3254",
                            "name": "PHYSICS FOR ELECTRONICS ENGINEERING",
                            "units": [
                                {
                                    "number": 1,
                                    "title": "ELECTRICAL PROPERTIES",
                                    "topics": ["Power dissipation in conductors", "Band theory"],
                                }
                            ],
                        },
                    ],
                }
            ]
        }
    )


def test_packaged_curriculum_loads_every_term() -> None:
    curriculum = CurriculumCatalog.from_json(settings.CURRICULUM_PATH)

    terms = curriculum.list_terms()

    assert [t.term for t in terms] == [1, 2, 3, 4, 5, 6, 7]
    assert all(t.subject_count > 0 for t in terms)
    assert "EC3251" in [s.code for s in curriculum.get_term(2).subjects]


def test_packaged_curriculum_topic_lookup() -> None:
    curriculum = CurriculumCatalog.from_json(settings.CURRICULUM_PATH)

    listing = curriculum.list_topics("EC3251", 1)
    location = curriculum.locate_topic("EC3251", 1, 3)

    assert listing.title == "DC CIRCUIT ANALYSIS"
    assert listing.topics[3] == "Ohms Law"
    assert location.subject.name == "CIRCUIT ANALYSIS"
    assert location.topic == "Ohms Law"


@pytest.mark.parametrize(
    "lookup,level",
    [
        (lambda c: c.get_term(42), "term"),
        (lambda c: c.get_subject("XX0000"), "subject"),
        (lambda c: c.get_unit("EC3251", 9), "unit"),
        (lambda c: c.locate_topic("EC3251", 2, 5), "topic"),
        (lambda c: c.locate_topic("EC3251", 2, -1), "topic"),
    ],
)
def test_missing_nodes_raise_lookup_error_with_level(lookup, level: str) -> None:
    with pytest.raises(CurriculumLookupError) as exc_info:
        lookup(_small_curriculum())

    assert exc_info.value.level == level


def test_curriculum_payload_without_terms_is_rejected() -> None:
    with pytest.raises(ValueError):
        CurriculumCatalog.from_dict({"subjects": []})


def test_packaged_reference_catalog() -> None:
    catalog = ReferenceCatalog.from_json(settings.REFERENCE_CATALOG_PATH)

    assert catalog.has_subject("ec3251")
    assert not catalog.has_subject("MA3151")
    assert [ref.citation for ref in catalog.references_for("EC3251")] == [
        "Engineering Circuit Analysis (Hayt, Kemmerly, Durbin)",
        "Electronic Devices and Circuit Theory (Boylestad)",
    ]
    assert catalog.references_for("MA3151") == ()


def test_reference_find_prefers_the_given_subject() -> None:
    catalog = ReferenceCatalog.from_dict(
        {
            "subjects": [
                {"code": "A1", "name": "A", "references": [{"title": "Shared Book", "authors": "First Ed."}]},
                {"code": "B2", "name": "B", "references": [{"title": "Shared Book", "authors": "Second Ed."}]},
            ]
        }
    )

    assert catalog.find("shared book", subject="B2").authors == "Second Ed."
    assert catalog.find("Shared Book").authors == "First Ed."
    assert catalog.find("Unknown Book") is None
    assert catalog.find("  ") is None


def test_inference_resolves_a_unique_subject() -> None:
    inference = CurriculumTopicInference(_small_curriculum())

    assert inference.infer("Thevenin and Norton") == "EC3251"
    assert inference.infer("band theory") == "PH3254"


def test_inference_returns_none_when_ambiguous_or_too_short() -> None:
    inference = CurriculumTopicInference(_small_curriculum())

    assert inference.infer("power") is None
    assert inference.infer("Ohm") is None
    assert inference.infer("quantum chromodynamics") is None


def test_no_inference_never_guesses() -> None:
    assert NoSubjectInference().infer("Thevenin and Norton") is None
