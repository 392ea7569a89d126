"""Tests for RouteTicketUseCase with in-memory fakes."""

from __future__ import annotations

import asyncio

import pytest

from intake.application.use_cases.detect_crisis import DetectCrisisUseCase
from intake.application.use_cases.record_assignment import AssignmentRecorder
from intake.application.use_cases.route_ticket import (
    REASON_NO_COUNSELOR,
    REASON_ROUTING_DISABLED,
    RouteTicketUseCase,
    RoutingRequest,
)
from intake.domain.entities.category import RoutingCategory
from intake.domain.entities.specialization import CounselorSpecialization
from intake.domain.errors import UnknownCategoryError
from intake.domain.value_objects.enums import (
    AssignmentMethod,
    AssignmentType,
    Priority,
    PriorityTier,
    RoutingState,
)
from tests.unit.application.fakes import (
    FakeCategoryRepo,
    FakeHistoryRepo,
    FakeLedger,
    FakeRuleRepo,
    FakeSpecializationRepo,
    SpecializationStore,
)

MENTAL_HEALTH = RoutingCategory(id=1, name="Mental Health")
ACADEMIC = RoutingCategory(id=2, name="Academic Support", crisis_detection_enabled=False)
MANUAL_ONLY = RoutingCategory(id=3, name="Manual Only", auto_assign=False)
RETIRED = RoutingCategory(id=4, name="Retired", is_active=False)


def _spec(sid, category_id=1, tier=PriorityTier.PRIMARY, current=0, maximum=10,
          expertise=5.0, **kw) -> CounselorSpecialization:
    return CounselorSpecialization(
        id=sid, counselor_id=100 + sid, category_id=category_id, tier=tier,
        current_workload=current, max_workload=maximum, expertise_rating=expertise,
        counselor_name=f"Counselor {sid}", **kw,
    )


class Harness:
    def __init__(self, specs, rules=(), rules_fail=False, record_fail=False,
                 history_fail=False, refuse=None, yield_after_read=False, max_attempts=0):
        self.store = SpecializationStore(list(specs))
        self.directory = FakeSpecializationRepo(self.store, yield_after_read=yield_after_read)
        self.ledger = FakeLedger(self.store, refuse=refuse)
        self.rules = FakeRuleRepo(list(rules), fail=rules_fail, fail_record=record_fail)
        self.history = FakeHistoryRepo(fail=history_fail)
        self.use_case = RouteTicketUseCase(
            category_repo=FakeCategoryRepo([MENTAL_HEALTH, ACADEMIC, MANUAL_ONLY, RETIRED]),
            specialization_repo=self.directory,
            ledger=self.ledger,
            detector=DetectCrisisUseCase(self.rules),
            recorder=AssignmentRecorder(self.history),
            max_attempts=max_attempts,
        )


def _request(ticket_id=1, category_id=1, subject="Need help",
             description="Cannot sleep before exams", priority=Priority.MEDIUM):
    return RoutingRequest(
        ticket_id=ticket_id, subject=subject, description=description,
        category_id=category_id, stated_priority=priority,
    )


# ─── Scenarios ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_crisis_ticket_is_escalated_and_assigned(default_rules, crisis_text):
    h = Harness([_spec(1)], rules=default_rules)

    result = await h.use_case.execute(
        _request(subject="Help", description=crisis_text, priority=Priority.LOW)
    )

    assert result.crisis_flag
    assert result.priority == Priority.URGENT
    assert result.priority_score == 150
    assert result.is_assigned
    assert result.assignee_id == 101
    assert result.assignment_method == AssignmentMethod.AUTO
    assert result.state == RoutingState.DONE
    assert any(m["keyword"] == "kill myself" for m in result.matched_keywords)
    assert h.store.workload(1) == 1


@pytest.mark.asyncio
async def test_no_counselor_leaves_ticket_unassigned(default_rules):
    h = Harness([_spec(1, current=5, maximum=5)], rules=default_rules)

    result = await h.use_case.execute(_request(priority=Priority.HIGH))

    assert not result.is_assigned
    assert result.assignment_method == AssignmentMethod.NONE
    assert result.assignment_reason == REASON_NO_COUNSELOR
    assert result.state == RoutingState.UNASSIGNED
    assert result.priority == Priority.HIGH
    assert result.priority_score == 75
    assert h.store.workload(1) == 5
    assert h.history.entries == []


@pytest.mark.asyncio
async def test_lower_tier_with_headroom_is_chosen():
    h = Harness([
        _spec(1, tier=PriorityTier.PRIMARY, current=8, maximum=10),
        _spec(2, tier=PriorityTier.SECONDARY, current=0, maximum=10),
    ])

    result = await h.use_case.execute(_request())

    assert result.specialization_id == 2
    assert h.store.workload(1) == 8
    assert h.store.workload(2) == 1


@pytest.mark.asyncio
async def test_concurrent_passes_do_not_oversubscribe_last_slot():
    h = Harness(
        [
            _spec(1, tier=PriorityTier.PRIMARY, current=4, maximum=5),
            _spec(2, tier=PriorityTier.BACKUP, current=0, maximum=5, expertise=1.0),
        ],
        yield_after_read=True,
    )

    first, second = await asyncio.gather(
        h.use_case.execute(_request(ticket_id=1)),
        h.use_case.execute(_request(ticket_id=2)),
    )

    assert {first.specialization_id, second.specialization_id} == {1, 2}
    assert h.store.workload(1) == 5
    assert h.store.workload(2) == 1


@pytest.mark.asyncio
async def test_concurrent_passes_single_slot_one_unassigned():
    h = Harness([_spec(1, current=4, maximum=5)], yield_after_read=True)

    results = await asyncio.gather(
        h.use_case.execute(_request(ticket_id=1)),
        h.use_case.execute(_request(ticket_id=2)),
    )

    assert sorted(r.is_assigned for r in results) == [False, True]
    assert h.store.workload(1) == 5
    loser = next(r for r in results if not r.is_assigned)
    assert loser.assignment_reason == REASON_NO_COUNSELOR


# ─── Category switches ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_auto_assign_disabled_skips_selection(default_rules, crisis_text):
    h = Harness([_spec(1, category_id=3)], rules=default_rules)

    result = await h.use_case.execute(_request(category_id=3, description=crisis_text))

    assert result.assignment_reason == REASON_ROUTING_DISABLED
    assert result.crisis_flag
    assert result.priority_score == 150
    assert h.directory.reads == 0
    assert h.ledger.reserve_calls == []


@pytest.mark.asyncio
async def test_inactive_category_is_not_routed():
    h = Harness([_spec(1, category_id=4)])

    result = await h.use_case.execute(_request(category_id=4))

    assert result.assignment_reason == REASON_ROUTING_DISABLED
    assert h.store.workload(1) == 0


@pytest.mark.asyncio
async def test_detection_disabled_category_skips_scan(default_rules, crisis_text):
    h = Harness([_spec(1, category_id=2)], rules=default_rules)

    result = await h.use_case.execute(
        _request(category_id=2, description=crisis_text, priority=Priority.LOW)
    )

    assert not result.crisis_flag
    assert result.priority == Priority.LOW
    assert result.priority_score == 25
    assert RoutingState.DETECTING not in result.trace
    assert result.is_assigned
    assert all(r.trigger_count == 0 for r in h.rules.rules.values())


@pytest.mark.asyncio
async def test_unknown_category_raises():
    h = Harness([])
    with pytest.raises(UnknownCategoryError):
        await h.use_case.execute(_request(category_id=99))


# ─── Failure handling ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_detection_failure_is_fail_safe(crisis_text):
    h = Harness([_spec(1)], rules_fail=True)

    result = await h.use_case.execute(
        _request(description=crisis_text, priority=Priority.HIGH)
    )

    assert not result.crisis_flag
    assert result.priority == Priority.HIGH
    assert result.priority_score == 75
    assert result.is_assigned


@pytest.mark.asyncio
async def test_trigger_counter_failure_still_escalates(default_rules, crisis_text):
    h = Harness([_spec(1)], rules=default_rules, record_fail=True)

    result = await h.use_case.execute(
        _request(description=crisis_text, priority=Priority.LOW)
    )

    assert result.crisis_flag
    assert result.priority == Priority.URGENT
    assert result.priority_score == 150
    assert result.is_assigned


@pytest.mark.asyncio
async def test_history_failure_does_not_undo_assignment():
    h = Harness([_spec(1)], history_fail=True)

    result = await h.use_case.execute(_request())

    assert result.is_assigned
    assert result.audit_entry_id is None
    assert h.store.workload(1) == 1
    assert h.ledger.release_calls == []


@pytest.mark.asyncio
async def test_lost_reservation_falls_back_to_next_candidate():
    h = Harness(
        [_spec(1, current=0), _spec(2, tier=PriorityTier.SECONDARY)],
        refuse={1},
    )

    result = await h.use_case.execute(_request())

    assert result.specialization_id == 2
    assert h.ledger.reserve_calls == [1, 2]
    assert h.directory.reads == 2
    assert h.store.workload(1) == 0


@pytest.mark.asyncio
async def test_max_attempts_bounds_the_retry_loop():
    h = Harness(
        [_spec(1), _spec(2, tier=PriorityTier.SECONDARY)],
        refuse={1, 2},
        max_attempts=1,
    )

    result = await h.use_case.execute(_request())

    assert not result.is_assigned
    assert h.ledger.reserve_calls == [1]


# ─── Audit and trace ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_auto_assignment_writes_one_history_entry():
    h = Harness([_spec(1, current=2, maximum=10)])

    result = await h.use_case.execute(_request(ticket_id=42))

    assert len(h.history.entries) == 1
    entry = h.history.entries[0]
    assert result.audit_entry_id == entry.id
    assert entry.ticket_id == 42
    assert entry.previous_assignee_id is None
    assert entry.new_assignee_id == 101
    assert entry.actor_id is None
    assert entry.assignment_type == AssignmentType.AUTO
    assert entry.reason == "Auto-assigned to Counselor 1 (Priority: primary, Workload: 2/10)"
    assert entry.criteria["specialization_id"] == 1
    assert entry.criteria["assignment_score"] == 80.0


@pytest.mark.asyncio
async def test_trigger_counters_recorded_once_per_ticket(default_rules):
    h = Harness([_spec(1)], rules=default_rules)

    await h.use_case.execute(_request(description="so depressed and hopeless"))

    assert h.rules.rules[4].trigger_count == 1
    assert h.rules.rules[5].trigger_count == 1
    assert h.rules.rules[4].last_triggered_at is not None
    assert h.rules.rules[2].trigger_count == 0


@pytest.mark.asyncio
async def test_trace_of_assigned_ticket():
    h = Harness([_spec(1)])

    result = await h.use_case.execute(_request())

    assert result.trace == [
        RoutingState.CREATED,
        RoutingState.DETECTING,
        RoutingState.SCORING,
        RoutingState.SELECTING,
        RoutingState.RESERVING,
        RoutingState.RECORDING,
        RoutingState.DONE,
    ]


def test_request_text_joins_subject_and_description():
    assert _request(subject="Hi", description="there").text == "Hi there"
    assert _request(subject="", description="only body").text == "only body"
