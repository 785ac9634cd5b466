"""Data classes for the study planner domain model."""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class Subject(str, Enum):
    TORTS = "Torts"
    CONTRACTS = "Contracts"
    EVIDENCE = "Evidence"
    CRIMINAL_LAW = "Crim Law & Pro"
    CON_LAW = "Con Law"
    REAL_PROPERTY = "Real Property"
    CIV_PRO = "Civ Pro"
    BUSINESS_ASSOCIATIONS = "Business Associations (Agency, Partnership, Corp, LLC)"


# Subjects tested on the multiple-choice section, in rotation order
MBE_SUBJECTS = (
    Subject.TORTS,
    Subject.CONTRACTS,
    Subject.EVIDENCE,
    Subject.CRIMINAL_LAW,
    Subject.CON_LAW,
    Subject.REAL_PROPERTY,
    Subject.CIV_PRO,
)


class TaskType(str, Enum):
    OUTLINE = "Outline"
    MBE = "MBE"
    MEE = "MEE"
    REVIEW = "Review"
    ACTIVE_RECALL = "ActiveRecall"
    RULE_WRITING = "RuleWriting"
    MOCK_EXAM = "MockExam"
    MOCK_REVIEW = "MockReview"
    ERROR_ANALYSIS = "ErrorAnalysis"
    TEMPLATE_REVIEW = "TemplateReview"
    FLASHCARD = "Flashcard"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class StudyTask:
    id: str
    date: str  # yyyy-MM-dd
    type: TaskType
    subject: Subject
    description: str
    estimated_minutes: int
    count: Optional[int] = None
    completed: bool = False
    memory_tag: Optional[str] = None
    linked_task_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "StudyTask":
        """Build a task from a Task Store record (camelCase keys)."""
        return cls(
            id=data["id"],
            date=data["date"],
            type=TaskType(data["type"]),
            subject=Subject(data["subject"]),
            description=data.get("description", ""),
            estimated_minutes=int(data.get("estimatedMinutes", 0)),
            count=data.get("count"),
            completed=bool(data.get("completed", False)),
            memory_tag=data.get("memoryTag"),
            linked_task_id=data.get("linkedTaskId"),
        )

    def to_dict(self) -> dict:
        record = {
            "id": self.id,
            "date": self.date,
            "type": self.type.value,
            "subject": self.subject.value,
            "description": self.description,
            "completed": self.completed,
            "estimatedMinutes": self.estimated_minutes,
        }
        if self.count is not None:
            record["count"] = self.count
        if self.memory_tag is not None:
            record["memoryTag"] = self.memory_tag
        if self.linked_task_id is not None:
            record["linkedTaskId"] = self.linked_task_id
        return record


@dataclass(frozen=True)
class ErrorEntry:
    id: str
    subject: Subject
    subtopic: str
    rule: str
    source: str = ""
    reason: str = ""
    key_facts: str = ""
    created_at: str = ""
    difficulty_level: Optional[str] = None


@dataclass(frozen=True)
class RuleCard:
    id: str
    subject: Subject
    rule_text: str
    priority: Priority
    created_date: str
    next_review_date: str
    review_count: int = 0
    last_review_date: str = ""


@dataclass(frozen=True)
class PracticeLog:
    id: str
    date: str
    subject: Subject
    total: int
    wrong: int


@dataclass
class UserProfile:
    exam_date: str
    daily_hours_weekday: float = 2.0
    daily_hours_weekend: float = 5.0
    mbe_goal: int = 2000
    target_score: int = 270


@dataclass(frozen=True)
class ErrorPattern:
    topic: str
    count: int
    priority: Priority
    subject: Optional[Subject] = None


@dataclass(frozen=True)
class MemoryStats:
    total_rules_in_deck: int
    overdue_count: int
    review_coverage_percentage: int  # target 80+
    active_recall_time_percent: int  # target 25-35

    def as_dict(self) -> dict:
        return asdict(self)
