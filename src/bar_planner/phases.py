"""Phase strategy table: one task-generation rule per stage of the plan.

The plan runs through six phases, from MBE foundations to final polish. Each
phase turns a single calendar day into that day's study tasks. Weekdays and
weekends use separate templates, and some slots only fire on every k-th day
of the month. A phase can also swap its rotation or templates for a range of
days at its start or end (``DayRangeOverride``).

Task ids are ``{phase}-{slot}-{origin date}``. Tasks a day schedules for later
dates (a mock review the next morning, say) keep the origin date in their id.
"""
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from bar_planner.dates import (
    add_days, day_of_week, format_iso_date, is_weekend, week_of_month,
)
from bar_planner.models import MBE_SUBJECTS, StudyTask, Subject, TaskType
from bar_planner.spaced import SPACED_INTERVALS, schedule_reviews

MONDAY, WEDNESDAY, FRIDAY = 1, 3, 5

ESSAY_SUBJECTS = (Subject.CONTRACTS, Subject.TORTS, Subject.EVIDENCE, Subject.CRIMINAL_LAW)
MPT_FORMATS = ("memo", "brief", "client-letter", "demand-letter")


@dataclass(frozen=True)
class DayContext:
    date: date
    days_since_start: int
    phase_day: int        # 0 on the first day of the phase
    phase_days_left: int  # 0 on the last day of the phase
    schedule_end: date

    @property
    def iso(self) -> str:
        return format_iso_date(self.date)

    @property
    def is_weekend(self) -> bool:
        return is_weekend(self.date)

    @property
    def day_of_month(self) -> int:
        return self.date.day

    @property
    def week_of_month(self) -> int:
        return week_of_month(self.date)

    @property
    def day_of_week(self) -> int:
        return day_of_week(self.date)

    @property
    def phase_length(self) -> int:
        return self.phase_day + self.phase_days_left + 1


Builder = Callable[["PhaseStrategy", DayContext], list[StudyTask]]


@dataclass(frozen=True)
class DayRangeOverride:
    """Replace a phase's rotation or templates for phase days first..last.

    Negative indices count back from the end of the phase, so (-7, -1) is the
    final week whatever the phase length.
    """
    first_day: int
    last_day: int
    rotation: Optional[Sequence[Subject]] = None
    weekday: Optional[Builder] = None
    weekend: Optional[Builder] = None

    def covers(self, ctx: DayContext) -> bool:
        first = self.first_day if self.first_day >= 0 else ctx.phase_length + self.first_day
        last = self.last_day if self.last_day >= 0 else ctx.phase_length + self.last_day
        return first <= ctx.phase_day <= last


class PhaseStrategy:
    key = ""
    title = ""
    rotation: Sequence[Subject] = MBE_SUBJECTS
    review_offsets: Sequence[int] = ()
    overrides: Sequence[DayRangeOverride] = ()

    def tasks_for(self, ctx: DayContext) -> list[StudyTask]:
        template = "weekend" if ctx.is_weekend else "weekday"
        for override in self.overrides:
            build = getattr(override, template)
            if build is not None and override.covers(ctx):
                return build(self, ctx)
        if ctx.is_weekend:
            return self.weekend_tasks(ctx)
        return self.weekday_tasks(ctx)

    def weekday_tasks(self, ctx: DayContext) -> list[StudyTask]:
        raise NotImplementedError

    def weekend_tasks(self, ctx: DayContext) -> list[StudyTask]:
        raise NotImplementedError

    def subject_for(self, ctx: DayContext, shift: int = 0) -> Subject:
        """Today's subject: weekly rotation, unless an override supplies one."""
        rotation, index = self.rotation, ctx.week_of_month
        for override in self.overrides:
            if override.rotation and override.covers(ctx):
                rotation, index = override.rotation, ctx.phase_day
                break
        return rotation[(index + shift) % len(rotation)]

    def task_id(self, ctx: DayContext, slot: str) -> str:
        return f"{self.key}-{slot}-{ctx.iso}"

    def slot(
        self,
        ctx: DayContext,
        slot: str,
        task_type: TaskType,
        subject: Subject,
        description: str,
        minutes: int,
        count: Optional[int] = None,
        memory_tag: Optional[str] = None,
        linked_task_id: Optional[str] = None,
        days_later: int = 0,
    ) -> list[StudyTask]:
        """One task, or nothing when ``days_later`` pushes it past the schedule end."""
        on = add_days(ctx.date, days_later)
        if on > ctx.schedule_end:
            return []
        return [StudyTask(
            id=self.task_id(ctx, slot),
            date=format_iso_date(on),
            type=task_type,
            subject=subject,
            description=description,
            estimated_minutes=minutes,
            count=count,
            memory_tag=memory_tag,
            linked_task_id=linked_task_id,
        )]

    def reviews_of(self, ctx: DayContext, origin: list[StudyTask]) -> list[StudyTask]:
        """Spaced reviews of a new-content task at this phase's offsets."""
        if not origin or not self.review_offsets:
            return []
        task = origin[0]
        return schedule_reviews(
            origin_date=ctx.date,
            subject=task.subject,
            base_description=f"{task.subject.value} material from {ctx.iso}, rewrite the rules without notes",
            offsets=self.review_offsets,
            schedule_end=ctx.schedule_end,
            linked_task_id=task.id,
            id_prefix=f"{self.key}-interval-{ctx.iso}",
        )

    def __repr__(self):
        return f"{type(self).__name__}({self.key!r})"


class FoundationPhase(PhaseStrategy):
    """MBE foundations with a mandatory active-recall block every weekday."""

    key = "foundation"
    title = "MBE Foundation"

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        return [
            *self.slot(ctx, "outline", TaskType.OUTLINE, subject,
                       f"Read and simplify {subject.value} rules - identify 5 key elements",
                       40, memory_tag="foundation"),
            *self.slot(ctx, "mbe", TaskType.MBE, subject,
                       f"{subject.value}: Solve 15 questions on UWorld",
                       50, count=15, memory_tag="practice"),
            *self.slot(ctx, "recall", TaskType.ACTIVE_RECALL, subject,
                       f"[Active Recall] Write out {subject.value} rule elements on blank paper "
                       f"(3-5 rules), then check against outline",
                       25, memory_tag="active-recall"),
        ]

    def weekend_tasks(self, ctx):
        subject = self.subject_for(ctx)
        return [
            *self.slot(ctx, "catchup", TaskType.OUTLINE, subject,
                       "Catch up on missed outlines and solve 10 extra questions", 120),
            *self.slot(ctx, "recall-wknd", TaskType.ACTIVE_RECALL, subject,
                       f"[Active Recall] Oral review - explain {subject.value} key rules out loud",
                       60, memory_tag="active-recall"),
        ]

    def mock_weekend(self, ctx):
        subject = self.subject_for(ctx)
        mock_id = self.task_id(ctx, "mock")
        return [
            *self.slot(ctx, "mock", TaskType.MOCK_EXAM, subject,
                       "50-Question Mixed MBE Mock Exam (timed)", 90, count=50),
            *self.slot(ctx, "mock-review", TaskType.MOCK_REVIEW, subject,
                       "Review mock errors and patch outline with missed rules",
                       120, memory_tag="error-analysis", linked_task_id=mock_id, days_later=1),
        ]

    overrides = (
        # Opening days alternate the two most-tested subjects
        DayRangeOverride(0, 2, rotation=(Subject.TORTS, Subject.CONTRACTS)),
        DayRangeOverride(-7, -1, weekend=mock_weekend),
    )


class SecondRoundPhase(PhaseStrategy):
    """Second pass over the MBE subjects with spaced reviews and weekly mocks."""

    key = "second-round"
    title = "MBE Second Round"
    review_offsets = SPACED_INTERVALS

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        outline = self.slot(ctx, "outline", TaskType.OUTLINE, subject,
                            f"Deepen {subject.value} outline - add case examples", 40)
        tasks = [
            *outline,
            *self.slot(ctx, "mbe", TaskType.MBE, subject,
                       f"{subject.value}: 20 questions on latest concepts",
                       60, count=20, memory_tag="practice"),
            *self.slot(ctx, "recall", TaskType.ACTIVE_RECALL, subject,
                       f"[Active Recall] Write 4-5 key {subject.value} rules on blank paper, compare with notes",
                       20, memory_tag="active-recall"),
        ]
        if ctx.day_of_month % 3 == 0:
            tasks += self.slot(ctx, "spaced", TaskType.REVIEW, subject,
                               f"[Spaced Repetition] Review {subject.value} from 3 days ago - "
                               f"rewrite rules without notes",
                               20, memory_tag="spaced-rep-3")
        if ctx.day_of_month % 7 == 0:
            tasks += self.slot(ctx, "spaced-week", TaskType.REVIEW, subject,
                               f"[Spaced Repetition] Week-long review - {subject.value} rules from day 1",
                               25, memory_tag="spaced-rep-7")
        return tasks + self.reviews_of(ctx, outline)

    def weekend_tasks(self, ctx):
        subject = self.subject_for(ctx)
        # Mock in the first half of each fortnight, reinforcement in the second
        if ((ctx.day_of_month - 1) // 14) % 2 == 0:
            mock_id = self.task_id(ctx, "mock")
            return [
                *self.slot(ctx, "mock", TaskType.MOCK_EXAM, subject,
                           "50-Question Mixed MBE Mock (timed, 60 min)", 90, count=50),
                *self.slot(ctx, "error-review", TaskType.ERROR_ANALYSIS, subject,
                           "[Targeted Spaced Rep] Review mock error topics - write rules for "
                           "missed concepts without looking at questions",
                           30, memory_tag="error-spaced-rep", linked_task_id=mock_id, days_later=2),
            ]
        return self.slot(ctx, "reinforce", TaskType.REVIEW, subject,
                         "Review past week errors and reinforce weak areas",
                         120, memory_tag="reinforcement")


class EssayFoundationPhase(PhaseStrategy):
    """MEE structure: rule writing, delayed recall and template practice."""

    key = "essay-foundation"
    title = "MEE Foundation"
    rotation = ESSAY_SUBJECTS
    review_offsets = SPACED_INTERVALS

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        if ctx.day_of_week == MONDAY:
            return [
                *self.slot(ctx, "rules", TaskType.RULE_WRITING, subject,
                           f"[Active Recall] Write 5 common {subject.value} essay rules on blank paper",
                           30, memory_tag="active-recall-rules"),
                *self.slot(ctx, "practice", TaskType.MBE, subject,
                           f"MBE practice: 20 {subject.value} questions", 45, count=20),
            ]
        elif ctx.day_of_week == WEDNESDAY:
            prior = self.subject_for(ctx, shift=-1)
            outline = self.slot(ctx, "outline", TaskType.OUTLINE, subject,
                                f"Study current week's {subject.value} outline", 40)
            return [
                *self.slot(ctx, "delayed", TaskType.ACTIVE_RECALL, prior,
                           f"[Delayed Recall] Write {prior.value} rules from last week without notes, then check",
                           30, memory_tag="delayed-recall"),
                *outline,
                *self.reviews_of(ctx, outline),
            ]
        elif ctx.day_of_week == FRIDAY:
            return [
                *self.slot(ctx, "template", TaskType.TEMPLATE_REVIEW, subject,
                           f"[Template Practice] Rewrite a {subject.value} MEE issue "
                           f"(issue headings + short rules only, no full answers)",
                           40, memory_tag="template-recall"),
                *self.slot(ctx, "mbe", TaskType.MBE, subject,
                           f"Timed {subject.value} MCQ: 15 questions in 18 minutes", 30, count=15),
            ]
        return self.slot(ctx, "general", TaskType.OUTLINE, subject,
                         "Outline review and case reading", 60)

    def weekend_tasks(self, ctx):
        subject = self.subject_for(ctx)
        mee_id = self.task_id(ctx, "mee")
        tasks = [
            *self.slot(ctx, "mee", TaskType.MEE, subject,
                       f"Timed MEE essay ({subject.value}): 30 minutes", 40),
            *self.slot(ctx, "mee-review", TaskType.MOCK_REVIEW, subject,
                       "[Format Retrieval Practice] Rewrite MEE format skeleton (headings, structure) "
                       "from memory without looking at original",
                       25, memory_tag="format-recall", linked_task_id=mee_id, days_later=1),
        ]
        if ctx.week_of_month % 2 == 0:
            tasks += self.slot(ctx, "mpt", TaskType.REVIEW, Subject.CIV_PRO,
                               "Introduction to MPT format - study instructions and task types",
                               45, days_later=1)
        return tasks


class EssayVolumePhase(PhaseStrategy):
    """Three-essay weekends, MPT practice and rewriting of old essays."""

    key = "essay-volume"
    title = "MEE Volume + MPT"
    rotation = ESSAY_SUBJECTS

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        tasks = [
            *self.slot(ctx, "rewrite", TaskType.MEE, subject,
                       f"[Rewriting] Rewrite old {subject.value} MEE: Step 1 (10 min) - "
                       f"sketch issue structure from memory only",
                       30, memory_tag="rewrite-phase-1"),
            *self.slot(ctx, "condense", TaskType.REVIEW, subject,
                       "[Rewriting] Step 2 - shorten rules and integrate facts more tightly",
                       20, memory_tag="rewrite-phase-2"),
        ]
        if ctx.day_of_month % 2 == 0:
            tasks += self.slot(ctx, "spaced-mee", TaskType.ACTIVE_RECALL, subject,
                               f"[Spaced Rep] View only {subject.value} MEE summary (no answer), "
                               f"rewrite issue structure",
                               25, memory_tag="mee-spaced-rep")
        return tasks

    def weekend_tasks(self, ctx):
        if ctx.week_of_month % 2 == 0:
            tasks = []
            for i in range(3):
                subject = self.subject_for(ctx, shift=i)
                tasks += self.slot(ctx, f"mee-{i + 1}", TaskType.MEE, subject,
                                   f"{subject.value} MEE Essay - 30 minutes", 40, days_later=i)
            tasks += self.slot(ctx, "recall-essays", TaskType.ACTIVE_RECALL, self.subject_for(ctx),
                               "[Spaced Rep] View only essay topics, rewrite issue list + key rules "
                               "(no full answers)",
                               30, memory_tag="essay-spaced-rep",
                               linked_task_id=self.task_id(ctx, "mee-1"), days_later=2)
            return tasks
        return [
            *self.slot(ctx, "mpt", TaskType.REVIEW, Subject.CIV_PRO, "Timed MPT Task - 90 minutes", 120),
            *self.slot(ctx, "case-recall", TaskType.ACTIVE_RECALL, Subject.CIV_PRO,
                       "[Case Rule Recall] Pick 2-3 key cases from MPT library, write case name + "
                       "core rules without referencing original task",
                       20, memory_tag="case-recall",
                       linked_task_id=self.task_id(ctx, "mpt"), days_later=2),
        ]


class SimulationPhase(PhaseStrategy):
    """High-volume MEE simulation backed by the rule deck."""

    key = "simulation"
    title = "High-Volume Simulation"
    rotation = ESSAY_SUBJECTS

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        if ctx.day_of_week in (MONDAY, WEDNESDAY):
            return [
                *self.slot(ctx, "deck", TaskType.RULE_WRITING, subject,
                           f"[Rule Deck] Review due {subject.value} rules - write 3-5 rules on blank paper, "
                           f"score yourself, adjust next review date",
                           20, memory_tag="rule-deck-adaptive"),
                *self.slot(ctx, "practice", TaskType.MBE, subject,
                           f"{subject.value} MBE: 15 questions", 30, count=15),
            ]
        tasks = self.slot(ctx, "mee", TaskType.MEE, subject, f"{subject.value} MEE - timed 30 min", 40)
        if ctx.day_of_month % 4 == 0:
            tasks += self.slot(ctx, "spaced-mee", TaskType.ACTIVE_RECALL, subject,
                               "[Spaced Rep] Rewrite past MEE outline (issue list only, no answers)",
                               20, memory_tag="mee-spaced")
        return tasks

    def weekend_tasks(self, ctx):
        if ctx.week_of_month % 2 == 0:
            tasks = []
            for i in range(3):
                subject = self.subject_for(ctx, shift=i)
                tasks += self.slot(ctx, f"mee-{i + 1}", TaskType.MEE, subject,
                                   f"MEE Session {i + 1}: {subject.value} - 30 minutes", 40, days_later=i)
            tasks += self.slot(ctx, "error-cards", TaskType.RULE_WRITING, self.subject_for(ctx),
                               "[Rule Deck Update] For any rules missed in essays, create new high-priority "
                               "cards in Rule Deck. Plan 2+ reviews in next 5 days",
                               30, memory_tag="rule-deck-update", days_later=3)
            return tasks
        return [
            *self.slot(ctx, "mpt", TaskType.REVIEW, Subject.CIV_PRO, "Full MPT Task - 90 minutes", 120),
            *self.slot(ctx, "mpt-template", TaskType.TEMPLATE_REVIEW, Subject.CIV_PRO,
                       "[Template Recall] Write task format template + 3 main issues + 1-2 bonus "
                       "issues you missed, from memory",
                       25, memory_tag="template-spaced",
                       linked_task_id=self.task_id(ctx, "mpt"), days_later=2),
        ]


class PolishPhase(PhaseStrategy):
    """Less new material, more review and rule deck maintenance."""

    key = "polish"
    title = "Final Polish"
    rotation = ESSAY_SUBJECTS

    def weekday_tasks(self, ctx):
        subject = self.subject_for(ctx)
        return [
            *self.slot(ctx, "template", TaskType.TEMPLATE_REVIEW, subject,
                       "[Template Maintenance] Sketch MEE template + MPT format from memory",
                       20, memory_tag="template-maintain"),
            *self.slot(ctx, "deck", TaskType.RULE_WRITING, subject,
                       "[Rule Deck] Review scheduled rules", 25, memory_tag="rule-deck"),
            *self.slot(ctx, "new", TaskType.MEE, subject, "New MEE or light practice", 30),
        ]

    def final_weeks(self, ctx):
        subject = self.subject_for(ctx)
        return [
            *self.slot(ctx, "deck", TaskType.RULE_WRITING, subject,
                       "[Rule Deck Priority] Write overdue high-priority rules from blank paper",
                       25, memory_tag="rule-deck-final"),
            *self.slot(ctx, "old-mee", TaskType.ACTIVE_RECALL, subject,
                       "[Spaced Rep] Rewrite old MEE outline (issue headings only, no answers)",
                       25, memory_tag="old-mee-final"),
            *self.slot(ctx, "light-practice", TaskType.MBE, subject,
                       "Light MBE: 5-10 current-week-topic questions", 15, count=8),
        ]

    def weekend_tasks(self, ctx):
        fmt = MPT_FORMATS[ctx.week_of_month % len(MPT_FORMATS)]
        return [
            *self.slot(ctx, "format", TaskType.TEMPLATE_REVIEW, Subject.CIV_PRO,
                       f"[Format Template Review] Sketch {fmt} format bone structure from memory, "
                       f"compare with sample",
                       30, memory_tag="format-recall"),
            *self.slot(ctx, "review", TaskType.REVIEW, self.subject_for(ctx),
                       "Light review session - past errors and weak areas", 90, memory_tag="final-review"),
        ]

    overrides = (
        DayRangeOverride(-14, -1, weekday=final_weeks),
    )


PHASES: tuple[PhaseStrategy, ...] = (
    FoundationPhase(),
    SecondRoundPhase(),
    EssayFoundationPhase(),
    EssayVolumePhase(),
    SimulationPhase(),
    PolishPhase(),
)


def phase_for_index(index: int) -> PhaseStrategy:
    """Phase by index. Anything past the last phase stays in the last phase."""
    if index < 0:
        raise ValueError(f"Phase index must not be negative, got {index}")
    return PHASES[min(index, len(PHASES) - 1)]
