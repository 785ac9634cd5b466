"""Planner configuration: defaults, plan options and profile loading."""
import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bar_planner.dates import parse_iso_date
from bar_planner.models import UserProfile

DEFAULT_PROFILE_PATH = str(Path.home() / ".bar_planner" / "profile.yaml")

DEFAULT_PROFILE = UserProfile(
    exam_date="2026-07-28",
    daily_hours_weekday=2,
    daily_hours_weekend=5,
    mbe_goal=2000,
    target_score=270,
)

# Profile Store keys -> UserProfile fields
PROFILE_KEYS = {
    "examDate": "exam_date",
    "dailyHoursWeekday": "daily_hours_weekday",
    "dailyHoursWeekend": "daily_hours_weekend",
    "mbeGoal": "mbe_goal",
    "targetScore": "target_score",
}


class PhaseIndexing(str, Enum):
    ELAPSED = "elapsed"    # months since the plan start date
    CALENDAR = "calendar"  # calendar month, January = first phase


class IncompletePolicy(str, Enum):
    DROP = "drop"
    RESCHEDULE = "reschedule"  # move to the plan end date


@dataclass(frozen=True)
class PlanOptions:
    phase_indexing: PhaseIndexing = PhaseIndexing.ELAPSED
    incomplete_policy: IncompletePolicy = IncompletePolicy.DROP


def read_profile_data(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        import yaml
        return yaml.safe_load(path.read_text()) or {}
    raise ValueError(f"Unsupported profile format: {path.name}")


def profile_from_dict(data: dict) -> UserProfile:
    """Build a profile from Profile Store keys (camelCase or snake_case)."""
    fields = {}
    for key, value in data.items():
        name = PROFILE_KEYS.get(key, key)
        if name in PROFILE_KEYS.values():
            fields[name] = value
    if "exam_date" not in fields:
        raise ValueError("Profile is missing examDate")
    # YAML reads unquoted dates as date objects
    exam_date = fields["exam_date"]
    fields["exam_date"] = exam_date if isinstance(exam_date, str) else exam_date.isoformat()
    parse_iso_date(fields["exam_date"])
    return UserProfile(**fields)


def load_profile(file_path: str = DEFAULT_PROFILE_PATH) -> UserProfile:
    """Load a profile from YAML or JSON."""
    return profile_from_dict(read_profile_data(file_path))
