"""Deterministic study plan generation."""
import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple, Union

from .config import config
from .date_resolver import local_today, parse_date
from .models import ClarificationNeeded, StudyDay, StudyPlan, StudyPlanRequest, StudyTask

logger = logging.getLogger(__name__)

GENERIC_TOPIC = "Review fundamental concepts"

INVALID_DATE_MESSAGE = (
    "Your exam date needs to be in the future so I can build a plan. "
    "Try something like \"Create a study plan for Biology exam on {example}\"."
)

# (title template, task type, percent of the day's minutes, priority)
TaskTemplate = Tuple[str, str, int, str]

EARLY_TASKS: List[TaskTemplate] = [
    ("{topic} - {subject}", "reading", 60, "high"),
    ("Practice basic {subject} problems", "practice", 40, "medium"),
]
MIDDLE_TASKS: List[TaskTemplate] = [
    ("Advanced {subject} concepts", "reading", 40, "high"),
    ("{subject} problem sets", "practice", 60, "high"),
]
LATE_TASKS: List[TaskTemplate] = [
    ("Review all {subject} materials", "review", 50, "high"),
    ("{subject} practice exam", "quiz", 50, "high"),
]


def phase_for(index: int, total_days: int) -> str:
    """Phase of day ``index``: early below 40% of the plan, middle below 80%, else late."""
    if index * 5 < total_days * 2:
        return "early"
    if index * 5 < total_days * 4:
        return "middle"
    return "late"


def _templates(phase: str) -> List[TaskTemplate]:
    if phase == "early":
        return EARLY_TASKS
    if phase == "middle":
        return MIDDLE_TASKS
    return LATE_TASKS


def _split_topics(topics: Union[str, Sequence[str], None]) -> List[str]:
    if not topics:
        return []
    if isinstance(topics, str):
        topics = topics.split(",")
    return [topic.strip() for topic in topics if topic and topic.strip()]


def _invalid_date(today: date) -> ClarificationNeeded:
    example = (today + timedelta(days=7)).isoformat()
    return ClarificationNeeded(reason="invalid_date", message=INVALID_DATE_MESSAGE.format(example=example))


def plan_length(exam_date: date, today: date) -> int:
    return min((exam_date - today).days, config.max_plan_days)


def synthesize(subject: str, exam_date: str, hours_per_day: float,
               topics: Union[str, Sequence[str], None] = None,
               today: Optional[date] = None) -> Union[List[StudyDay], ClarificationNeeded]:
    """Build the day-by-day schedule leading up to an exam.

    Days start at ``today`` and run for ``min(days until exam, max_plan_days)``.
    Each day carries exactly two tasks whose mix depends on the phase of the
    plan. User topics are cycled over the early days; without topics every
    early day reads the generic topic.
    """
    today = today or local_today()
    exam = parse_date(exam_date)
    if exam is None:
        return _invalid_date(today)

    total_days = plan_length(exam, today)
    if total_days <= 0:
        logger.info(f"Rejected study plan for {subject}: exam {exam_date} is not after {today}")
        return _invalid_date(today)

    topic_list = _split_topics(topics)
    day_minutes = hours_per_day * 60
    days = []

    for index in range(total_days):
        topic = topic_list[index % len(topic_list)] if topic_list else GENERIC_TOPIC
        tasks = [
            StudyTask(
                title=title.format(topic=topic, subject=subject),
                duration_minutes=math.floor(day_minutes * percent / 100),
                task_type=task_type,
                priority=priority,
            )
            for title, task_type, percent, priority in _templates(phase_for(index, total_days))
        ]
        days.append(StudyDay(
            day_number=index + 1,
            date=(today + timedelta(days=index)).isoformat(),
            total_hours=hours_per_day,
            tasks=tasks,
        ))

    return days


def build_study_plan(request: StudyPlanRequest, today: Optional[date] = None,
                     user_id: Optional[str] = None) -> Union[StudyPlan, ClarificationNeeded]:
    """Wrap ``synthesize`` output in a ``StudyPlan`` record."""
    days = synthesize(request.subject, request.exam_date, request.hours_per_day, request.topics, today)
    if isinstance(days, ClarificationNeeded):
        return days

    exam = parse_date(request.exam_date)
    return StudyPlan(
        user_id=user_id,
        subject=request.subject,
        exam_date=exam.isoformat(),
        hours_per_day=request.hours_per_day,
        topics=request.topics,
        total_days=len(days),
        days=days,
    )


def compute_progress(plan: StudyPlan) -> int:
    """Refresh day completion flags and return the completed-task percentage."""
    total = 0
    done = 0
    for day in plan.days:
        total += len(day.tasks)
        finished = sum(1 for task in day.tasks if task.completed)
        done += finished
        day.completed = bool(day.tasks) and finished == len(day.tasks)

    plan.progress = round(done / total * 100) if total else 0
    return plan.progress
