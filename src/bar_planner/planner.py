"""Schedule generation: walks the date range and assembles the full plan."""
import logging
import warnings
from dataclasses import replace
from datetime import date
from itertools import groupby
from typing import Iterable, Iterator, Optional, Sequence

from bar_planner.config import IncompletePolicy, PhaseIndexing, PlanOptions
from bar_planner.dates import (
    DateLike, InvalidDateFormat, days_between, each_day, format_iso_date,
    months_between, parse_iso_date, to_date,
)
from bar_planner.models import ErrorEntry, StudyTask, UserProfile
from bar_planner.phases import DayContext, PhaseStrategy, phase_for_index
from bar_planner.review import analyze_error_patterns, create_error_review_tasks

logger = logging.getLogger(__name__)


class EmptyRangeWarning(UserWarning):
    """The end date is before the start date; nothing was generated."""


def phase_index_for(day: date, start: date, indexing: PhaseIndexing = PhaseIndexing.ELAPSED) -> int:
    if indexing == PhaseIndexing.CALENDAR:
        return day.month - 1
    return months_between(start, day)


def iter_day_contexts(
    start: date,
    end: date,
    indexing: PhaseIndexing = PhaseIndexing.ELAPSED,
) -> Iterator[tuple[PhaseStrategy, DayContext]]:
    """Pair every day in start..end with its phase and day context."""
    days = [(d, phase_for_index(phase_index_for(d, start, indexing))) for d in each_day(start, end)]
    for phase, run in groupby(days, key=lambda pair: pair[1]):
        run_days = [d for d, _ in run]
        for i, d in enumerate(run_days):
            yield phase, DayContext(
                date=d,
                days_since_start=days_between(start, d),
                phase_day=i,
                phase_days_left=len(run_days) - 1 - i,
                schedule_end=end,
            )


def partition_tasks(tasks: Iterable[StudyTask], start: date) -> tuple[list[StudyTask], list[StudyTask]]:
    """Split into (dated before start, dated on or after start).

    Tasks with an unreadable date land in neither list.
    """
    preserved, discarded = [], []
    for task in tasks:
        try:
            task_date = parse_iso_date(task.date)
        except InvalidDateFormat:
            logger.warning("Skipping task %s with unreadable date %r", task.id, task.date)
            continue
        if task_date < start:
            preserved.append(task)
        else:
            discarded.append(task)
    return preserved, discarded


def _with_unique_ids(tasks: Iterable[StudyTask], taken: set[str]) -> list[StudyTask]:
    unique = []
    for task in tasks:
        if task.id in taken:
            n = 2
            while f"{task.id}-{n}" in taken:
                n += 1
            logger.warning("Task id %s already in plan, renamed to %s-%d", task.id, task.id, n)
            task = replace(task, id=f"{task.id}-{n}")
        taken.add(task.id)
        unique.append(task)
    return unique


def generate_plan(
    start_date: DateLike,
    end_date: DateLike,
    existing_tasks: Sequence[StudyTask] = (),
    errors: Sequence[ErrorEntry] = (),
    options: Optional[PlanOptions] = None,
) -> list[StudyTask]:
    """Build the plan from start_date to end_date inclusive.

    Tasks dated before start_date are kept as they are. Tasks on or after it
    are dropped, or with ``IncompletePolicy.RESCHEDULE`` the incomplete ones
    are moved to end_date. When ``errors`` are given, reviews of the most
    frequently missed topics are added from start_date. The inputs are not
    modified.

    Raises:
        InvalidDateFormat: start_date or end_date cannot be parsed.
    """
    options = options or PlanOptions()
    start = to_date(start_date)
    end = to_date(end_date)
    preserved, discarded = partition_tasks(existing_tasks, start)

    if end < start:
        warnings.warn(
            f"End date {format_iso_date(end)} is before start date {format_iso_date(start)}",
            EmptyRangeWarning,
            stacklevel=2,
        )
        return preserved

    generated = []
    for phase, ctx in iter_day_contexts(start, end, options.phase_indexing):
        generated.extend(phase.tasks_for(ctx))

    if errors:
        patterns = analyze_error_patterns(errors)
        generated.extend(create_error_review_tasks(patterns, start, schedule_end=end))

    if options.incomplete_policy == IncompletePolicy.RESCHEDULE:
        end_iso = format_iso_date(end)
        generated.extend(replace(t, date=end_iso) for t in discarded if not t.completed)

    plan = preserved + _with_unique_ids(generated, {t.id for t in preserved})
    logger.debug(
        "Planned %s..%s: %d new tasks, %d preserved, %d replaced",
        format_iso_date(start), format_iso_date(end),
        len(plan) - len(preserved), len(preserved), len(discarded),
    )
    return plan


def plan_until_exam(
    profile: UserProfile,
    start_date: DateLike,
    existing_tasks: Sequence[StudyTask] = (),
    errors: Sequence[ErrorEntry] = (),
    options: Optional[PlanOptions] = None,
) -> list[StudyTask]:
    """Plan from start_date through the profile's exam date."""
    return generate_plan(start_date, profile.exam_date, existing_tasks, errors, options)


def roll_over_incomplete(tasks: Iterable[StudyTask], today: DateLike) -> list[StudyTask]:
    """Move unfinished tasks from past days onto today."""
    today = to_date(today)
    today_iso = format_iso_date(today)
    rolled = []
    for task in tasks:
        try:
            overdue = not task.completed and parse_iso_date(task.date) < today
        except InvalidDateFormat:
            logger.warning("Leaving task %s with unreadable date %r in place", task.id, task.date)
            overdue = False
        rolled.append(replace(task, date=today_iso) if overdue else task)
    return rolled


def tasks_by_date(tasks: Iterable[StudyTask]) -> dict[str, list[StudyTask]]:
    """Group tasks by date, keeping insertion order within each day."""
    grouped: dict[str, list[StudyTask]] = {}
    for task in tasks:
        grouped.setdefault(task.date, []).append(task)
    return grouped
