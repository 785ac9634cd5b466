"""Rule deck: adaptive spaced repetition for missed legal rules."""
import math
from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from bar_planner.dates import add_days, format_iso_date
from bar_planner.models import ErrorEntry, MemoryStats, Priority, RuleCard, StudyTask, TaskType
from bar_planner.review import analyze_error_patterns

# (days if score > 80, days otherwise)
REVIEW_INTERVALS = {
    Priority.HIGH: (3, 1),
    Priority.MEDIUM: (5, 2),
    Priority.LOW: (7, 3),
}
MASTERY_SCORE = 80

RECALL_TYPES = {TaskType.ACTIVE_RECALL, TaskType.RULE_WRITING}
RECALL_TAG_MARKERS = ("recall", "rule-writing")


def create_rule_card(error: ErrorEntry, today: date, priority: Priority = Priority.HIGH) -> RuleCard:
    """New card for a missed rule, first due tomorrow."""
    return RuleCard(
        id=f"rule-{error.id}",
        subject=error.subject,
        rule_text=error.rule,
        priority=priority,
        created_date=format_iso_date(today),
        next_review_date=format_iso_date(add_days(today, 1)),
    )


def build_rule_deck(errors: Sequence[ErrorEntry], today: date) -> list[RuleCard]:
    """One card per error entry, prioritized by how often its subtopic was missed."""
    priorities = {p.topic: p.priority for p in analyze_error_patterns(errors)}
    return [create_rule_card(e, today, priorities[e.subtopic]) for e in errors]


def next_interval(priority: Priority, performance_score: int) -> int:
    mastered, struggling = REVIEW_INTERVALS[priority]
    return mastered if performance_score > MASTERY_SCORE else struggling


def update_card(card: RuleCard, performance_score: int, today: date) -> RuleCard:
    """Record a review scored 0-100 and push the next review date out.

    The card is not modified; the updated copy is returned.
    """
    if not 0 <= performance_score <= 100:
        raise ValueError(f"Performance score must be 0-100, got {performance_score}")
    days = next_interval(card.priority, performance_score)
    return replace(
        card,
        next_review_date=format_iso_date(add_days(today, days)),
        review_count=card.review_count + 1,
        last_review_date=format_iso_date(today),
    )


def get_due_cards(deck: Iterable[RuleCard], as_of: date) -> list[RuleCard]:
    """Cards due today or overdue."""
    as_of_iso = format_iso_date(as_of)
    return [c for c in deck if c.next_review_date <= as_of_iso]


def get_overdue_cards(deck: Iterable[RuleCard], as_of: date) -> list[RuleCard]:
    as_of_iso = format_iso_date(as_of)
    return [c for c in deck if c.next_review_date < as_of_iso]


def is_active_recall(task: StudyTask) -> bool:
    if task.type in RECALL_TYPES:
        return True
    tag = task.memory_tag or ""
    return any(marker in tag for marker in RECALL_TAG_MARKERS)


def _percent(part: float, whole: float) -> int:
    if not whole:
        return 0
    # Half-up, so 62.5 reads as 63
    return max(0, math.floor(part / whole * 100 + 0.5))


def compute_stats(
    deck: Sequence[RuleCard],
    tasks: Iterable[StudyTask],
    total_study_minutes: int,
    today: date,
) -> MemoryStats:
    overdue = len(get_overdue_cards(deck, today))
    recall_minutes = sum(t.estimated_minutes for t in tasks if is_active_recall(t))
    return MemoryStats(
        total_rules_in_deck=len(deck),
        overdue_count=overdue,
        review_coverage_percentage=_percent(len(deck) - overdue, len(deck)),
        active_recall_time_percent=_percent(recall_minutes, total_study_minutes),
    )
