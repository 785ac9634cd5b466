from datetime import date

import pytest

from bar_planner.models import ErrorEntry, StudyTask, Subject, TaskType


@pytest.fixture
def today():
    return date(2026, 3, 10)


@pytest.fixture
def make_task():
    """Factory for plain study tasks."""
    def _make(task_id, task_date, completed=False, **kwargs):
        fields = {
            "type": TaskType.OUTLINE,
            "subject": Subject.TORTS,
            "description": "Read outline",
            "estimated_minutes": 30,
        }
        fields.update(kwargs)
        return StudyTask(id=task_id, date=task_date, completed=completed, **fields)
    return _make


@pytest.fixture
def make_error():
    def _make(error_id, subtopic, subject=Subject.EVIDENCE, rule="Hearsay is inadmissible"):
        return ErrorEntry(id=error_id, subject=subject, subtopic=subtopic, rule=rule)
    return _make


@pytest.fixture
def sample_errors(make_error):
    """Subtopic counts: Hearsay 3, Negligence 2, Removal 1."""
    return [
        make_error("e1", "Hearsay"),
        make_error("e2", "Negligence", subject=Subject.TORTS),
        make_error("e3", "Hearsay"),
        make_error("e4", "Removal", subject=Subject.CIV_PRO),
        make_error("e5", "Negligence", subject=Subject.TORTS),
        make_error("e6", "Hearsay"),
    ]
