"""Turns one chat message into a persistence command, a clarification or a query.

Nothing here performs I/O. The caller supplies ``today`` and executes whatever
command comes back.
"""
import logging
from datetime import date
from typing import Union

from .field_extractor import (
    NoteFields,
    ScheduleFields,
    StudyPlanFields,
    StudySessionFields,
    TaskFields,
    extract,
)
from .intent_classifier import intent_classifier
from .models import (
    ClarificationNeeded,
    InformationalQuery,
    NoteDraft,
    PersistenceCommand,
    ScheduleItem,
    StudyPlanRequest,
    StudySession,
    Task,
)
from .responses import responder
from .study_plan import build_study_plan

logger = logging.getLogger(__name__)

Interpretation = Union[PersistenceCommand, ClarificationNeeded, InformationalQuery]


def _schedule_command(fields: ScheduleFields) -> PersistenceCommand:
    item = ScheduleItem(
        subject=fields.subject,
        time_slot=fields.time_slot,
        day_of_week=fields.day_of_week,
        type=fields.type,
    )
    return PersistenceCommand(kind="create_schedule_item", payload=item)


def _task_command(fields: TaskFields) -> PersistenceCommand:
    task = Task(
        title=fields.title,
        subject=fields.subject,
        due_date=fields.due_date,
        priority=fields.priority,
        estimated_hours=fields.estimated_hours,
    )
    return PersistenceCommand(kind="create_task", payload=task)


def _session_command(fields: StudySessionFields) -> PersistenceCommand:
    session = StudySession(
        subject=fields.subject,
        duration_minutes=fields.duration_minutes,
        session_date=fields.session_date,
        notes=fields.notes,
    )
    return PersistenceCommand(kind="create_study_session", payload=session)


def _note_command(fields: NoteFields) -> PersistenceCommand:
    return PersistenceCommand(kind="create_note", payload=NoteDraft(title=fields.title, text=fields.text))


def _plan_command(fields: StudyPlanFields, today: date) -> Union[PersistenceCommand, ClarificationNeeded]:
    request = StudyPlanRequest(
        subject=fields.subject,
        exam_date=fields.exam_date,
        hours_per_day=fields.hours_per_day,
        topics=fields.topics,
    )
    plan = build_study_plan(request, today)
    if isinstance(plan, ClarificationNeeded):
        return plan
    return PersistenceCommand(kind="create_study_plan", payload=plan)


def interpret(message: str, today: date) -> Interpretation:
    """Classify ``message`` and build what the matching intent needs."""
    intent = intent_classifier.classify(message)
    fields = extract(message, intent, today)
    if fields is None:
        return InformationalQuery(message=message)

    missing = fields.missing()
    if missing:
        logger.info(f"{intent} message missing {missing}")
        return ClarificationNeeded(reason="parse_failure", message=responder.clarification(intent, missing))

    if isinstance(fields, ScheduleFields):
        return _schedule_command(fields)
    if isinstance(fields, TaskFields):
        return _task_command(fields)
    if isinstance(fields, StudySessionFields):
        return _session_command(fields)
    if isinstance(fields, StudyPlanFields):
        return _plan_command(fields, today)
    return _note_command(fields)
