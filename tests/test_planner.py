# tests/test_planner.py
import logging
from datetime import date

import pytest

from bar_planner.config import IncompletePolicy, PhaseIndexing, PlanOptions
from bar_planner.dates import InvalidDateFormat
from bar_planner.models import TaskType, UserProfile
from bar_planner.planner import (
    EmptyRangeWarning, generate_plan, iter_day_contexts, partition_tasks,
    phase_index_for, plan_until_exam, roll_over_incomplete, tasks_by_date,
)

START = date(2026, 1, 14)


def test_phase_index_elapsed_months():
    assert phase_index_for(date(2026, 2, 13), START) == 0
    assert phase_index_for(date(2026, 2, 14), START) == 1
    assert phase_index_for(date(2026, 7, 28), START) == 6


def test_phase_index_calendar_months():
    assert phase_index_for(date(2026, 1, 31), START, PhaseIndexing.CALENDAR) == 0
    assert phase_index_for(date(2026, 2, 1), START, PhaseIndexing.CALENDAR) == 1


def test_day_contexts_restart_at_phase_boundary():
    contexts = list(iter_day_contexts(START, date(2026, 2, 20)))
    assert len(contexts) == 38
    foundation = [ctx for phase, ctx in contexts if phase.key == "foundation"]
    second = [ctx for phase, ctx in contexts if phase.key == "second-round"]
    assert foundation[0].phase_day == 0
    assert foundation[-1].date == date(2026, 2, 13)
    assert foundation[-1].phase_days_left == 0
    assert foundation[-1].phase_length == 31
    assert second[0].date == date(2026, 2, 14)
    assert second[0].phase_day == 0
    assert second[0].days_since_start == 31
    assert all(ctx.schedule_end == date(2026, 2, 20) for _, ctx in contexts)


def test_three_day_plan():
    plan = generate_plan("2026-01-14", "2026-01-16")
    assert len(plan) == 9
    counts = {d: len(ts) for d, ts in tasks_by_date(plan).items()}
    assert counts == {"2026-01-14": 3, "2026-01-15": 3, "2026-01-16": 3}
    assert all(not t.completed for t in plan)
    assert [t.type for t in plan[:3]] == [TaskType.OUTLINE, TaskType.MBE, TaskType.ACTIVE_RECALL]


def test_accepts_date_objects():
    assert generate_plan(START, date(2026, 1, 16)) == generate_plan("2026-01-14", "2026-01-16")


def test_plan_is_deterministic():
    assert generate_plan("2026-01-14", "2026-03-31") == generate_plan("2026-01-14", "2026-03-31")


def test_single_day_plan():
    plan = generate_plan("2026-03-10", "2026-03-10")
    assert plan
    assert all(t.date == "2026-03-10" for t in plan)


def test_end_before_start_warns_and_keeps_past_tasks(make_task):
    old = make_task("old", "2026-01-01")
    with pytest.warns(EmptyRangeWarning):
        plan = generate_plan("2026-01-14", "2026-01-10", existing_tasks=[old])
    assert plan == [old]


def test_malformed_dates_raise():
    with pytest.raises(InvalidDateFormat):
        generate_plan("14/01/2026", "2026-01-16")
    with pytest.raises(InvalidDateFormat):
        generate_plan("2026-01-14", "2026-13-01")


def test_tasks_before_start_preserved_in_order(make_task):
    existing = [
        make_task("a", "2026-01-05", completed=True),
        make_task("future", "2026-01-15"),
        make_task("b", "2026-01-13"),
    ]
    plan = generate_plan("2026-01-14", "2026-01-16", existing_tasks=existing)
    assert [t.id for t in plan[:2]] == ["a", "b"]
    assert plan[0].completed is True
    assert "future" not in {t.id for t in plan}
    assert len(plan) == 11


def test_existing_tasks_not_modified(make_task):
    existing = [make_task("future", "2026-01-15")]
    generate_plan("2026-01-14", "2026-01-16", existing_tasks=existing,
                  options=PlanOptions(incomplete_policy=IncompletePolicy.RESCHEDULE))
    assert existing[0].date == "2026-01-15"


def test_regeneration_replaces_only_the_future():
    plan = generate_plan("2026-01-14", "2026-02-28")
    regenerated = generate_plan("2026-02-01", "2026-02-28", existing_tasks=plan)
    expected = [t for t in plan if t.date < "2026-02-01"] + generate_plan("2026-02-01", "2026-02-28")
    assert regenerated == expected


def test_unreadable_task_date_skipped_with_warning(make_task, caplog):
    existing = [make_task("bad", "someday"), make_task("ok", "2026-01-01")]
    with caplog.at_level(logging.WARNING, logger="bar_planner"):
        plan = generate_plan("2026-01-14", "2026-01-14", existing_tasks=existing)
    assert "bad" not in {t.id for t in plan}
    assert plan[0].id == "ok"
    assert "Skipping task bad" in caplog.text


def test_partition_tasks(make_task):
    preserved, discarded = partition_tasks(
        [make_task("a", "2026-01-13"), make_task("b", "2026-01-14")], START,
    )
    assert [t.id for t in preserved] == ["a"]
    assert [t.id for t in discarded] == ["b"]


def test_reschedule_moves_incomplete_future_tasks_to_end(make_task):
    existing = [
        make_task("foundation-outline-2026-01-14", "2026-01-14"),
        make_task("done", "2026-01-15", completed=True),
        make_task("custom", "2026-01-15"),
    ]
    options = PlanOptions(incomplete_policy=IncompletePolicy.RESCHEDULE)
    plan = generate_plan("2026-01-14", "2026-01-16", existing_tasks=existing, options=options)
    by_id = {t.id: t for t in plan}
    assert "done" not in by_id
    assert by_id["custom"].date == "2026-01-16"
    assert by_id["foundation-outline-2026-01-14-2"].date == "2026-01-16"
    assert by_id["foundation-outline-2026-01-14"].date == "2026-01-14"
    assert len(by_id) == len(plan) == 11


def test_calendar_indexing_uses_month_of_year():
    calendar = PlanOptions(phase_indexing=PhaseIndexing.CALENDAR)
    assert generate_plan("2026-02-02", "2026-02-02", options=calendar)[0].id.startswith("second-round-")
    assert generate_plan("2026-02-02", "2026-02-02")[0].id.startswith("foundation-")


def test_error_reviews_added_from_start(sample_errors):
    plan = generate_plan("2026-01-14", "2026-01-20", errors=sample_errors)
    reviews = [t for t in plan if t.type == TaskType.ERROR_ANALYSIS]
    assert [t.date for t in reviews] == ["2026-01-15", "2026-01-17"]
    assert all("Hearsay" in t.description for t in reviews)


def test_error_reviews_clipped_to_end(sample_errors):
    plan = generate_plan("2026-01-14", "2026-01-15", errors=sample_errors)
    assert len([t for t in plan if t.type == TaskType.ERROR_ANALYSIS]) == 1


def test_plan_until_exam_stops_at_exam_date():
    profile = UserProfile(exam_date="2026-02-10")
    plan = plan_until_exam(profile, "2026-01-14")
    assert max(t.date for t in plan) == "2026-02-10"
    assert plan == generate_plan("2026-01-14", "2026-02-10")


def test_roll_over_incomplete(make_task):
    tasks = [
        make_task("late", "2026-03-08"),
        make_task("finished", "2026-03-08", completed=True),
        make_task("today", "2026-03-10"),
        make_task("later", "2026-03-12"),
    ]
    rolled = roll_over_incomplete(tasks, "2026-03-10")
    assert [t.date for t in rolled] == ["2026-03-10", "2026-03-08", "2026-03-10", "2026-03-12"]
    assert [t.id for t in rolled] == ["late", "finished", "today", "later"]
    assert tasks[0].date == "2026-03-08"


def test_roll_over_leaves_unreadable_dates(make_task, caplog):
    with caplog.at_level(logging.WARNING, logger="bar_planner"):
        rolled = roll_over_incomplete([make_task("bad", "someday")], date(2026, 3, 10))
    assert rolled[0].date == "someday"
    assert "bad" in caplog.text


def test_tasks_by_date_keeps_order(make_task):
    grouped = tasks_by_date([
        make_task("a", "2026-03-10"), make_task("b", "2026-03-11"), make_task("c", "2026-03-10"),
    ])
    assert [t.id for t in grouped["2026-03-10"]] == ["a", "c"]
    assert list(grouped) == ["2026-03-10", "2026-03-11"]
