from __future__ import annotations

import asyncio
import random
from typing import Callable

import pytest

from study_assistant.domain.content.sections import MISSING_SECTION_PLACEHOLDER
from study_assistant.domain.curriculum.models import (
    SubjectRef,
    TermSummary,
    TopicContent,
    TopicListing,
    UnitRef,
)
from study_assistant.domain.exceptions import GenerationError, NavigationError, NotReadyError
from study_assistant.domain.navigation.controller import (
    GENERATION_FAILED_NOTICE,
    NavigationController,
)
from study_assistant.domain.navigation.models import HIERARCHY, Selection, View

CIRCUITS = SubjectRef(code="EC3251", name="CIRCUIT ANALYSIS")
PHYSICS = SubjectRef(code="PH3151", name="ENGINEERING PHYSICS")
DC_UNIT = UnitRef(number=1, title="DC CIRCUIT ANALYSIS")
THEOREMS = UnitRef(number=2, title="NETWORK THEOREM AND DUALITY")

TOPIC_DOCUMENT = (
    "**1. 📘 Detailed Explanation**\n"
    "Ohm's law relates voltage and current.\n\n"
    "**2. 🧮 Key Formulas**\n"
    "**V = I × R**\n"
    "- V: Voltage (Volts)\n"
    "**4. 🔗 IEEE Paper References**\n"
    "See https://ieeexplore.ieee.org/document/123\n"
    "**5. 🧩 Prerequisite & Related Topics**\n"
    "- Kirchhoff's laws\n"
)


class _FakeProvider:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def list_terms(self):
        self.calls.append(("terms",))
        return [TermSummary(term=1, subject_count=5), TermSummary(term=2, subject_count=7)]

    async def list_subjects(self, term: int):
        self.calls.append(("subjects", term))
        return [CIRCUITS] if term == 2 else [PHYSICS]

    async def list_units(self, subject_code: str):
        self.calls.append(("units", subject_code))
        return [DC_UNIT, THEOREMS]

    async def list_topics(self, subject_code: str, unit_number: int):
        self.calls.append(("topics", subject_code, unit_number))
        return TopicListing(title="DC CIRCUIT ANALYSIS", topics=("Ohms Law", "Mesh analysis"))

    async def get_topic_content(self, subject_code: str, unit_number: int, topic_index: int):
        self.calls.append(("content", subject_code, unit_number, topic_index))
        return TopicContent(
            subject="CIRCUIT ANALYSIS",
            unit="DC CIRCUIT ANALYSIS",
            topic="Ohms Law",
            content=TOPIC_DOCUMENT,
        )


class _GatedProvider(_FakeProvider):
    """Holds list_units responses until the test releases them."""

    def __init__(self) -> None:
        super().__init__()
        self.gates: list[asyncio.Event] = []

    async def list_units(self, subject_code: str):
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().list_units(subject_code)


class _FailingProvider(_FakeProvider):
    async def list_terms(self):
        raise RuntimeError("connection reset")

    async def get_topic_content(self, subject_code: str, unit_number: int, topic_index: int):
        raise GenerationError("model unavailable", transient=True, attempts=2)


class _RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, int, int]] = []

    async def record_progress(self, subject_code: str, unit_number: int, topic_index: int) -> None:
        self.calls.append((subject_code, unit_number, topic_index))
        if self.fail:
            raise RuntimeError("network down")


async def _until(condition: Callable[[], bool], rounds: int = 50) -> None:
    for _ in range(rounds):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def _open_topic(controller: NavigationController) -> None:
    controller.select_term(2)
    controller.select_subject(CIRCUITS)
    controller.select_unit(DC_UNIT)
    controller.select_topic(0)


def test_drill_down_moves_through_every_view() -> None:
    controller = NavigationController(_FakeProvider())

    assert controller.view is View.SEMESTERS
    assert controller.select_term(2) is View.SUBJECTS
    assert controller.select_subject(CIRCUITS) is View.UNITS
    assert controller.select_unit(DC_UNIT) is View.TOPICS
    assert controller.select_topic(3) is View.CONTENT
    assert controller.selection == Selection(term=2, subject=CIRCUITS, unit=DC_UNIT, topic_index=3)


def test_go_back_clears_only_the_deepest_field() -> None:
    controller = NavigationController(_FakeProvider())
    _open_topic(controller)

    assert controller.go_back() is View.TOPICS
    assert controller.selection == Selection(term=2, subject=CIRCUITS, unit=DC_UNIT)
    assert controller.go_back() is View.UNITS
    assert controller.selection == Selection(term=2, subject=CIRCUITS)
    assert controller.go_back() is View.SUBJECTS
    assert controller.go_back() is View.SEMESTERS
    assert controller.selection == Selection()
    assert controller.go_back() is View.SEMESTERS


def test_selecting_upstream_clears_downstream_fields() -> None:
    controller = NavigationController(_FakeProvider())
    _open_topic(controller)

    assert controller.select_subject(PHYSICS) is View.UNITS
    assert controller.selection == Selection(term=2, subject=PHYSICS)

    controller.select_unit(THEOREMS)
    controller.select_topic(1)
    assert controller.select_term(1) is View.SUBJECTS
    assert controller.selection == Selection(term=1)


def test_all_terms_sentinel_returns_to_root() -> None:
    controller = NavigationController(_FakeProvider())
    _open_topic(controller)

    assert controller.select_term("all") is View.SEMESTERS
    assert controller.selection == Selection()


def test_setters_reject_missing_upstream_selection() -> None:
    controller = NavigationController(_FakeProvider())

    with pytest.raises(NavigationError):
        controller.select_subject(CIRCUITS)
    with pytest.raises(NavigationError):
        controller.select_unit(DC_UNIT)
    with pytest.raises(NavigationError):
        controller.select_topic(0)
    with pytest.raises(NavigationError):
        controller.select_term("second")

    controller.select_term(2)
    controller.select_subject(CIRCUITS)
    controller.select_unit(DC_UNIT)
    with pytest.raises(NavigationError):
        controller.select_topic(-1)
    assert controller.selection == Selection(term=2, subject=CIRCUITS, unit=DC_UNIT)


def test_selection_stays_consistent_under_random_operations() -> None:
    rng = random.Random(20240611)
    controller = NavigationController(_FakeProvider())
    operations = [
        lambda: controller.select_term(rng.choice([1, 2, "all"])),
        lambda: controller.select_subject(rng.choice([CIRCUITS, PHYSICS])),
        lambda: controller.select_unit(rng.choice([DC_UNIT, THEOREMS])),
        lambda: controller.select_topic(rng.randint(0, 5)),
        controller.go_back,
        controller.go_to_root,
    ]

    for _ in range(2000):
        before = controller.selection
        try:
            rng.choice(operations)()
        except NavigationError:
            assert controller.selection == before

        selection = controller.selection
        assert selection.is_consistent()
        deepest = selection.deepest_field()
        expected = {
            None: View.SEMESTERS,
            "term": View.SUBJECTS,
            "subject": View.UNITS,
            "unit": View.TOPICS,
            "topic_index": View.CONTENT,
        }[deepest]
        assert controller.view is expected
        if deepest is not None:
            populated = HIERARCHY[: HIERARCHY.index(deepest) + 1]
            assert all(getattr(selection, name) is not None for name in populated)


@pytest.mark.asyncio
async def test_fetch_loads_the_current_view() -> None:
    provider = _FakeProvider()
    controller = NavigationController(provider)

    terms = await controller.fetch()
    controller.select_term(2)
    subjects = await controller.fetch()

    assert terms.ok and subjects.ok
    assert [t.term for t in terms.payload] == [1, 2]
    assert subjects.payload == [CIRCUITS]
    assert controller.data() == [CIRCUITS]
    assert provider.calls == [("terms",), ("subjects", 2)]


@pytest.mark.asyncio
async def test_fetch_without_required_selection_is_not_ready() -> None:
    provider = _FakeProvider()
    controller = NavigationController(provider)
    controller.select_term(2)

    result = await controller.fetch(View.CONTENT)

    assert result.status == "not_ready"
    assert result.missing == ("subject", "unit", "topic_index")
    assert provider.calls == []


@pytest.mark.asyncio
async def test_content_fetch_extracts_and_normalizes_sections() -> None:
    controller = NavigationController(_FakeProvider())
    _open_topic(controller)

    result = await controller.fetch()

    assert result.ok
    view = result.payload
    assert view.topic == "Ohms Law"
    assert list(view.sections) == [
        "Detailed Explanation",
        "Key Formulas",
        "Visuals & Diagrams",
        "IEEE Paper References",
        "Prerequisite & Related Topics",
    ]
    assert view.sections["Detailed Explanation"] == "<p>Ohm's law relates voltage and current.</p>"
    assert view.sections["Key Formulas"].startswith('<div class="formula"><strong>V = I × R</strong></div>')
    assert '<ul class="var-list"><li><strong>V</strong>: Voltage (Volts)</li></ul>' in view.sections["Key Formulas"]
    assert view.sections["Visuals & Diagrams"] == MISSING_SECTION_PLACEHOLDER
    assert '<a href="https://ieeexplore.ieee.org/document/123">' in view.sections["IEEE Paper References"]
    assert view.sections["Prerequisite & Related Topics"] == "<ul><li>Kirchhoff's laws</li></ul>"


@pytest.mark.asyncio
async def test_superseded_fetch_is_reported_stale() -> None:
    provider = _GatedProvider()
    controller = NavigationController(provider)
    controller.select_term(2)
    controller.select_subject(PHYSICS)

    first = asyncio.ensure_future(controller.fetch())
    await _until(lambda: len(provider.gates) == 1)

    controller.select_subject(CIRCUITS)
    second = asyncio.ensure_future(controller.fetch())
    await _until(lambda: len(provider.gates) == 2)
    for gate in provider.gates:
        gate.set()

    first_result = await first
    second_result = await second

    assert first_result.status == "stale"
    assert second_result.ok
    assert second_result.selection.subject == CIRCUITS
    assert controller.data(View.UNITS) == [DC_UNIT, THEOREMS]


@pytest.mark.asyncio
async def test_response_for_an_abandoned_selection_is_discarded() -> None:
    provider = _GatedProvider()
    controller = NavigationController(provider)
    controller.select_term(2)
    controller.select_subject(CIRCUITS)

    pending = asyncio.ensure_future(controller.fetch())
    await _until(lambda: len(provider.gates) == 1)
    controller.go_back()
    provider.gates[0].set()

    result = await pending

    assert result.status == "stale"
    assert controller.view is View.SUBJECTS
    assert controller.data(View.UNITS) is None


@pytest.mark.asyncio
async def test_applied_data_is_hidden_after_selection_moves_away() -> None:
    controller = NavigationController(_FakeProvider())
    controller.select_term(2)
    controller.select_subject(CIRCUITS)
    await controller.fetch()

    controller.select_subject(PHYSICS)

    assert controller.data(View.UNITS) is None


@pytest.mark.asyncio
async def test_generation_failure_surfaces_fixed_notice() -> None:
    controller = NavigationController(_FailingProvider())
    _open_topic(controller)

    result = await controller.fetch()

    assert result.status == "failed"
    assert result.error == GENERATION_FAILED_NOTICE
    assert controller.data() is None


@pytest.mark.asyncio
async def test_load_failure_names_the_level() -> None:
    controller = NavigationController(_FailingProvider())

    result = await controller.fetch()

    assert result.status == "failed"
    assert result.error == "Failed to load semesters. Please try again."


def test_mark_completed_requires_an_open_topic() -> None:
    controller = NavigationController(_FakeProvider())
    controller.select_term(2)
    controller.select_subject(CIRCUITS)

    with pytest.raises(NotReadyError) as exc_info:
        controller.mark_completed()

    assert exc_info.value.missing == ("unit", "topic_index")
    assert len(controller.tracker) == 0


@pytest.mark.asyncio
async def test_mark_completed_notifies_once_per_new_record() -> None:
    notifier = _RecordingNotifier()
    controller = NavigationController(_FakeProvider(), notifier=notifier)
    _open_topic(controller)

    assert controller.mark_completed() is True
    assert controller.mark_completed() is False
    await controller.drain()

    assert notifier.calls == [("EC3251", 1, 0)]
    assert controller.is_completed("EC3251", 1, 0)
    assert not controller.is_completed("EC3251", 1, 1)


@pytest.mark.asyncio
async def test_notifier_failure_keeps_local_completion() -> None:
    notifier = _RecordingNotifier(fail=True)
    controller = NavigationController(_FakeProvider(), notifier=notifier)
    _open_topic(controller)

    assert controller.mark_completed() is True
    await controller.drain()

    assert notifier.calls == [("EC3251", 1, 0)]
    assert controller.is_completed("EC3251", 1, 0)
    assert len(controller.tracker) == 1


def test_mark_completed_outside_an_event_loop_notifies_before_returning() -> None:
    notifier = _RecordingNotifier()
    controller = NavigationController(_FakeProvider(), notifier=notifier)
    _open_topic(controller)

    assert controller.mark_completed() is True

    assert notifier.calls == [("EC3251", 1, 0)]
    assert controller.mark_completed() is False
    assert notifier.calls == [("EC3251", 1, 0)]


def test_failing_notifier_outside_an_event_loop_keeps_local_completion() -> None:
    notifier = _RecordingNotifier(fail=True)
    controller = NavigationController(_FakeProvider(), notifier=notifier)
    _open_topic(controller)

    assert controller.mark_completed() is True

    assert notifier.calls == [("EC3251", 1, 0)]
    assert controller.is_completed("EC3251", 1, 0)
