"""Spaced repetition review injection."""
from datetime import date
from typing import Optional, Sequence

from bar_planner.dates import add_days, format_iso_date
from bar_planner.models import StudyTask, Subject, TaskType

SPACED_INTERVALS = (1, 3, 7, 14)
EXTENDED_INTERVALS = (1, 3, 7, 14, 30)


def schedule_reviews(
    origin_date: date,
    subject: Subject,
    base_description: str,
    offsets: Sequence[int],
    schedule_end: date,
    task_type: TaskType = TaskType.REVIEW,
    linked_task_id: Optional[str] = None,
    id_prefix: Optional[str] = None,
    estimated_minutes: int = 20,
    memory_tag: Optional[str] = None,
    label: str = "Spaced Rep",
) -> list[StudyTask]:
    """Emit one review task per offset that still falls inside the schedule.

    Args:
        origin_date: Day the material was first studied.
        subject: Subject of the reviewed material.
        base_description: What to review.
        offsets: Days after ``origin_date``, e.g. (1, 3, 7, 14).
        schedule_end: Last schedulable day. Later reviews are dropped.
        task_type: Review or ActiveRecall, depending on the caller.
        linked_task_id: Id of the task being reviewed.
        id_prefix: Id stem; must be unique per origin. Defaults to
            ``spaced-{origin_date}``.
        estimated_minutes: Planned length of each review.
        memory_tag: Fixed tag for every review. Defaults to ``spaced-rep-{offset}``.
        label: Bracketed tag opening the description (presentation only).

    Returns:
        Review tasks in ascending date order.
    """
    origin_iso = format_iso_date(origin_date)
    prefix = id_prefix or f"spaced-{origin_iso}"
    tasks = []
    for n, offset in enumerate(sorted(offsets), start=1):
        if offset <= 0:
            raise ValueError(f"Review offsets must be positive, got {offset}")
        review_date = add_days(origin_date, offset)
        if review_date > schedule_end:
            # Offsets are sorted, so every later one is out of range too
            break
        review_iso = format_iso_date(review_date)
        tasks.append(StudyTask(
            id=f"{prefix}-{review_iso}-r{n}",
            date=review_iso,
            type=task_type,
            subject=subject,
            description=f"[{label}] {base_description} (review {n}, +{offset}d after {origin_iso})",
            estimated_minutes=estimated_minutes,
            memory_tag=memory_tag or f"spaced-rep-{offset}",
            linked_task_id=linked_task_id,
        ))
    return tasks
