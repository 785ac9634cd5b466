"""Error pattern analysis and targeted error review tasks."""
from datetime import date
from typing import Iterable, Optional, Sequence

from bar_planner.dates import format_iso_date
from bar_planner.models import ErrorEntry, ErrorPattern, Priority, StudyTask, Subject, TaskType
from bar_planner.spaced import schedule_reviews

ERROR_REVIEW_OFFSETS = (1, 3)
MAX_ERROR_TOPICS = 5


def priority_for_count(count: int) -> Priority:
    if count >= 3:
        return Priority.HIGH
    elif count >= 2:
        return Priority.MEDIUM
    return Priority.LOW


def analyze_error_patterns(errors: Iterable[ErrorEntry]) -> list[ErrorPattern]:
    """Group missed rules by subtopic, most frequent first.

    Topics with equal counts keep the order in which they were first seen.
    """
    counts: dict[str, int] = {}
    subjects: dict[str, Subject] = {}
    for error in errors:
        counts[error.subtopic] = counts.get(error.subtopic, 0) + 1
        subjects.setdefault(error.subtopic, error.subject)
    patterns = [
        ErrorPattern(
            topic=topic,
            count=count,
            priority=priority_for_count(count),
            subject=subjects[topic],
        )
        for topic, count in counts.items()
    ]
    # sorted() is stable, so dict insertion order breaks ties
    return sorted(patterns, key=lambda p: p.count, reverse=True)


def create_error_review_tasks(
    patterns: Sequence[ErrorPattern],
    start_date: date,
    subject: Optional[Subject] = None,
    schedule_end: Optional[date] = None,
) -> list[StudyTask]:
    """Schedule reviews 1 and 3 days out for the top high-priority topics."""
    high = [p for p in patterns if p.priority == Priority.HIGH]
    high = sorted(high, key=lambda p: p.count, reverse=True)[:MAX_ERROR_TOPICS]
    end = schedule_end or date.max
    start_iso = format_iso_date(start_date)
    tasks = []
    for idx, pattern in enumerate(high):
        task_subject = subject or pattern.subject
        if task_subject is None:
            raise ValueError(f"No subject for error topic {pattern.topic!r}")
        tasks.extend(schedule_reviews(
            origin_date=start_date,
            subject=task_subject,
            base_description=(
                f"{pattern.topic}: Write key rules from memory "
                f"(appeared {pattern.count}x in errors)"
            ),
            offsets=ERROR_REVIEW_OFFSETS,
            schedule_end=end,
            task_type=TaskType.ERROR_ANALYSIS,
            id_prefix=f"error-review-{idx}-{start_iso}",
            estimated_minutes=15,
            memory_tag=f"error-{pattern.priority.value}",
            label="Error Analysis",
        ))
    return tasks
