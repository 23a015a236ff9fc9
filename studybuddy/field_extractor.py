"""Regex-driven field extraction from chat messages.

Each field has an ordered list of matchers; the first matcher that captures a
non-empty value wins. Extraction never raises: anything that cannot be found is
left as None and the caller decides whether to ask for clarification.
"""
import re
from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel

from .config import config
from .date_resolver import parse_date, resolve_day, resolve_relative_date
from .matchers import Literal, Pattern, first_match
from .models import ParsedScheduleRequest, Priority, ScheduleType, TimeOfDay

DAY_NAMES = "monday|tuesday|wednesday|thursday|friday|saturday|sunday"
DATE_PHRASE = (
    r"\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4}"
    r"|tomorrow|today|tonight|next week|next month"
    r"|in \d+ (?:days?|weeks?)|\d+ (?:days?|weeks?)"
    rf"|(?:next |this )?(?:{DAY_NAMES})"
)
EVENT_KEYWORDS = "quiz|exam|test|midterm|final|class|lecture|lab|seminar|tutorial"
EXAM_KEYWORDS = "exam|test|quiz|midterm|final"
WORK_KEYWORDS = "assignment|homework|essay|project|report|reading|problem set|lab"

# Lookaheads that end a free-text capture
SCHEDULE_STOP = (
    r"(?=\s+(?:at|on|by|tomorrow|today|tonight|next|this|every|from)\b"
    r"|\s*[.,!?;]|\s*$)"
)
TASK_STOP = (
    r"(?=\s+(?:due|by|before|on|tomorrow|today|tonight|next|this|in\s+\d+|with"
    r"|urgent|asap|(?:high|low|medium)\s+priority|when i have time|no rush)\b"
    r"|\s*\(|\s*[.,!?;]|\s*$)"
)
SESSION_STOP = (
    r"(?=\s+(?:for|on|about|at|today|yesterday|tonight|this|covering|from)\b"
    r"|\s+\d|\s*[.,!?;]|\s*$)"
)
PLAN_STOP = (
    rf"(?=\s+(?:{EXAM_KEYWORDS}|on|by|in|next|tomorrow|with|covering|including|topics?|focus)\b"
    r"|\s+\d|\s*[.,!?;:]|\s*$)"
)


def _time(hour: str, minute: str, meridiem: str) -> Optional[TimeOfDay]:
    hour_value, minute_value = int(hour), int(minute)
    if not 1 <= hour_value <= 12 or minute_value > 59:
        return None
    return TimeOfDay(hour=hour_value, minute=minute_value, meridiem=f"{meridiem}M")


TIME_MATCHERS = [
    Pattern.compile(r"\b(\d{1,2}):(\d{2})\s*([ap])\.?m\.?\b",
                    lambda m: _time(m.group(1), m.group(2), m.group(3))),
    Pattern.compile(r"\b(\d{1,2})\s*([ap])\.?m\.?\b",
                    lambda m: _time(m.group(1), "0", m.group(2))),
]

DAY_MATCHERS = [
    Pattern.compile(rf"\b(next\s+(?:{DAY_NAMES}))\b", lambda m: m.group(1).lower()),
    Pattern.compile(rf"\b({DAY_NAMES})\b", lambda m: m.group(1).lower()),
    Pattern.compile(r"\b(tomorrow)\b", lambda m: m.group(1).lower()),
    Pattern.compile(r"\b(today|tonight|this (?:morning|afternoon|evening))\b",
                    lambda m: m.group(1).lower()),
]

SCHEDULE_SUBJECT_MATCHERS = [
    # "for my Math quiz": a "for X" capture bounded by an event keyword
    Pattern.compile(
        rf"\bfor\s+(?:my\s+|the\s+|an?\s+)?((?:[\w&+\-']+\s+){{1,4}}?(?:{EVENT_KEYWORDS}))\b"),
    # "for Chemistry at 3 PM"
    Pattern.compile(rf"\b(?:for|about|regarding)\s+(?:my\s+|the\s+|an?\s+)?(.+?){SCHEDULE_STOP}"),
    # "add Physics lecture on Monday"
    Pattern.compile(
        rf"\b(?:add|schedule|set|put)\s+(?:my\s+|the\s+|an?\s+|new\s+)*"
        rf"((?:[\w&+\-']+\s+){{1,4}}?(?:{EVENT_KEYWORDS}))\b"),
]

SCHEDULE_TYPE_MATCHERS = [
    Literal(("exam", "quiz", "test", "midterm", "final"), "exam"),
    Literal(("reminder", "remind"), "reminder"),
]

TASK_TITLE_MATCHERS = [
    # "add a task to finish the lab report"
    Pattern.compile(
        r"\b(?:add|create|make|new)\s+(?:a\s+|an\s+)?(?:new\s+)?"
        r"(?:(?:high|low|medium)[\s-]+priority\s+)?(?:task|todo|to-do)\s*"
        rf"(?:to\s+|:\s*|-\s*|called\s+|named\s+)?(.+?){TASK_STOP}"),
    # "remind me to email the TA"
    Pattern.compile(rf"\bremind me to\s+(.+?){TASK_STOP}"),
    # "I need to read chapter 4"
    Pattern.compile(
        rf"\b(?:i need to|i have to|i must|don'?t forget to)\s+(.+?){TASK_STOP}"),
    # "add my History essay"
    Pattern.compile(
        rf"\b(?:add|create)\s+(?:my\s+|an?\s+|the\s+)?"
        rf"((?:[\w&+\-']+\s+){{0,4}}?(?:{WORK_KEYWORDS}))\b"),
]

_NOT_SUBJECTS = r"(?!(?:Add|Create|Make|New|My|The|Finish|Write|Submit|Do|Complete|Study|Read|Review|Start|I)\b)"

TASK_SUBJECT_MATCHERS = [
    Pattern.compile(
        r"\b(?:for|in)\s+(?:my\s+|the\s+)?([A-Z][\w&+\-]*(?:\s+[A-Z0-9][\w&+\-]*)*)",
        flags=0),
    Pattern.compile(
        rf"\b{_NOT_SUBJECTS}([A-Z][\w&+\-]*)\s+(?:{WORK_KEYWORDS}|{EXAM_KEYWORDS})\b",
        flags=0),
]

DUE_DATE_MATCHERS = [
    Pattern.compile(rf"\b(?:due|by|before|on)\s+(?:on\s+)?({DATE_PHRASE})\b"),
    Pattern.compile(rf"\b({DATE_PHRASE})\b"),
]

PRIORITY_MATCHERS = [
    Literal(("urgent", "asap", "high priority"), "high"),
    Literal(("low priority", "when i have time", "no rush"), "low"),
    Literal(("medium priority", "normal priority"), "medium"),
]

ESTIMATE_MATCHERS = [
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:hours?|hrs?|h)\b", lambda m: float(m.group(1))),
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:minutes?|mins?)\b", lambda m: round(float(m.group(1)) / 60, 2)),
]

DURATION_MATCHERS = [
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:hours?|hrs?|h)\b",
                    lambda m: round(float(m.group(1)) * 60)),
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:minutes?|mins?|m)\b",
                    lambda m: max(1, round(float(m.group(1))))),
]

SESSION_SUBJECT_MATCHERS = [
    # "studied Biology for 90 minutes"
    Pattern.compile(rf"\bstudied\s+(?!for\b|on\b|about\b)(.+?){SESSION_STOP}"),
    # "study session for my Physics exam"
    Pattern.compile(
        rf"\bstudy(?:ing)?\s+session\s+(?:for|on|about)\s+(?:my\s+|the\s+)?(.+?){SESSION_STOP}"),
    # "logged 2 hours on Chemistry"
    Pattern.compile(r"\b(?:for|on)\s+(?:my\s+|the\s+)?([A-Z][\w&+\-]*(?:\s+[A-Z0-9][\w&+\-]*)*)",
                    flags=0),
]

SESSION_NOTES_MATCHERS = [
    Pattern.compile(r"\bnotes?\s*:\s*(.+?)\s*$"),
    Pattern.compile(r"\b(?:minutes?|mins?|hours?|hrs?)\s+(?:on|about|covering)\s+(.+?)[.!?]*\s*$"),
    Pattern.compile(r"\b(?:covering|focused on|focusing on)\s+(.+?)[.!?]*\s*$"),
]

SESSION_DATE_MATCHERS = [
    Pattern.compile(
        r"\b(yesterday|today|tonight|this (?:morning|afternoon|evening)"
        r"|\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4})\b"),
]

PLAN_SUBJECT_MATCHERS = [
    # "study plan for Biology exam"
    Pattern.compile(
        r"\b(?:study\s+plan|study\s+schedule|plan|prepare|preparing|revise|revision|studying)"
        rf"\s+(?:me\s+)?for\s+(?:my\s+|the\s+|an?\s+)?(.+?){PLAN_STOP}"),
    # "studying Organic Chemistry"
    Pattern.compile(rf"\bstudying\s+(?!for\b)(.+?){PLAN_STOP}"),
    # "for my Calculus final"
    Pattern.compile(rf"\b(?:for|on)\s+(?:my\s+|the\s+)?(.+?)\s+(?:{EXAM_KEYWORDS})\b"),
]

EXAM_DATE_MATCHERS = [
    Pattern.compile(rf"\b(?:{EXAM_KEYWORDS})\b.*?\b(?:on|by|for|is|in)\s+({DATE_PHRASE})\b"),
    Pattern.compile(rf"\b(?:on|by|before|in)\s+({DATE_PHRASE})\b"),
    Pattern.compile(rf"\b({DATE_PHRASE})\b"),
]

HOURS_PER_DAY_MATCHERS = [
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\s*(?:per|a|each|every|/)\s*day\b",
                    lambda m: float(m.group(1))),
    Pattern.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\s+daily\b",
                    lambda m: float(m.group(1))),
]

TOPIC_MATCHERS = [
    Pattern.compile(
        rf"\b(?:topics?|covering|including|focus(?:ing)? on)\s*:?\s+(.+?)"
        rf"(?=\s+(?:{EXAM_KEYWORDS})\b|[.!?]?\s*$)"),
]

NOTE_TITLE_MATCHERS = [
    Pattern.compile(r"\bnotes?\s+(?:on|about|for|from)\s+(.+?)\s*:"),
    Pattern.compile(r"\btitled?\s+[\"']?(.+?)[\"']?\s*:"),
]

NOTE_TEXT_MATCHERS = [
    Pattern.compile(r":\s*(.+?)\s*$", flags=re.IGNORECASE | re.DOTALL),
]


class ScheduleFields(BaseModel):
    subject: Optional[str] = None
    time_slot: Optional[str] = None
    day_of_week: Optional[str] = None
    type: ScheduleType = "class"

    def missing(self) -> List[str]:
        return [name for name in ("subject", "time_slot", "day_of_week") if not getattr(self, name)]


class TaskFields(BaseModel):
    title: Optional[str] = None
    subject: Optional[str] = None
    due_date: Optional[str] = None
    priority: Priority = "medium"
    estimated_hours: float = 1.0

    def missing(self) -> List[str]:
        return [] if self.title else ["title"]


class StudySessionFields(BaseModel):
    subject: Optional[str] = None
    duration_minutes: int = 60
    session_date: Optional[str] = None
    notes: Optional[str] = None

    def missing(self) -> List[str]:
        missing = [] if self.subject else ["subject"]
        if self.duration_minutes <= 0:
            missing.append("duration_minutes")
        return missing


class StudyPlanFields(BaseModel):
    subject: Optional[str] = None
    exam_date: Optional[str] = None
    hours_per_day: float = 2
    topics: Optional[str] = None

    def missing(self) -> List[str]:
        missing = [name for name in ("subject", "exam_date") if not getattr(self, name)]
        if self.hours_per_day <= 0:
            missing.append("hours_per_day")
        return missing


class NoteFields(BaseModel):
    title: str
    text: Optional[str] = None

    def missing(self) -> List[str]:
        return [] if self.text else ["text"]


ExtractedFields = Union[ScheduleFields, TaskFields, StudySessionFields, StudyPlanFields, NoteFields]


def _clean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = re.sub(r"\s+", " ", value).strip(" \t\n\"'.,;:!?")
    value = re.sub(r"^(?:my|the|a|an)\s+", "", value, flags=re.IGNORECASE)
    return value or None


def _strip_event_suffix(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    stripped = re.sub(rf"\s+(?:{EXAM_KEYWORDS}|class)$", "", value, flags=re.IGNORECASE)
    return stripped or value


def _to_iso(phrase: Optional[str], today: date) -> Optional[str]:
    if not phrase:
        return None
    resolved = resolve_relative_date(phrase, today)
    if not resolved:
        return None
    parsed = parse_date(resolved)
    return parsed.isoformat() if parsed else resolved


def extract_time(message: str) -> Optional[TimeOfDay]:
    return first_match(TIME_MATCHERS, message)


def extract_priority(message: str) -> Priority:
    return first_match(PRIORITY_MATCHERS, message, default="medium")


def extract_duration_minutes(message: str) -> int:
    return first_match(DURATION_MATCHERS, message, default=config.default_session_minutes)


def extract_hours_per_day(message: str) -> float:
    return first_match(HOURS_PER_DAY_MATCHERS, message, default=config.default_hours_per_day)


def extract_topics(message: str) -> Optional[str]:
    raw = first_match(TOPIC_MATCHERS, message)
    if not raw:
        return None
    parts = re.split(r",|\band\b|;", raw)
    topics = [_clean(part) for part in parts]
    return ", ".join(topic for topic in topics if topic) or None


def extract_due_date(message: str, today: date) -> Optional[str]:
    return _to_iso(first_match(DUE_DATE_MATCHERS, message), today)


def parse_schedule_request(message: str) -> ParsedScheduleRequest:
    """Raw time/day/subject captures from a schedule message."""
    return ParsedScheduleRequest(
        time_match=extract_time(message),
        day_match=first_match(DAY_MATCHERS, message),
        subject_match=_clean(first_match(SCHEDULE_SUBJECT_MATCHERS, message)),
        raw_message=message,
    )


def extract_schedule_fields(message: str, today: date) -> ScheduleFields:
    parsed = parse_schedule_request(message)
    return ScheduleFields(
        subject=parsed.subject_match,
        time_slot=parsed.time_match.label() if parsed.time_match else None,
        day_of_week=resolve_day(parsed.day_match, today) if parsed.day_match else None,
        type=first_match(SCHEDULE_TYPE_MATCHERS, message, default="class"),
    )


def extract_task_fields(message: str, today: date) -> TaskFields:
    return TaskFields(
        title=_clean(first_match(TASK_TITLE_MATCHERS, message)),
        subject=_clean(first_match(TASK_SUBJECT_MATCHERS, message)),
        due_date=extract_due_date(message, today),
        priority=extract_priority(message),
        estimated_hours=first_match(ESTIMATE_MATCHERS, message, default=config.default_task_hours),
    )


def extract_study_session_fields(message: str, today: date) -> StudySessionFields:
    subject = _strip_event_suffix(_clean(first_match(SESSION_SUBJECT_MATCHERS, message)))
    session_date = _to_iso(first_match(SESSION_DATE_MATCHERS, message), today)
    return StudySessionFields(
        subject=subject,
        duration_minutes=extract_duration_minutes(message),
        session_date=session_date or today.isoformat(),
        notes=_clean(first_match(SESSION_NOTES_MATCHERS, message)),
    )


def extract_study_plan_fields(message: str, today: date) -> StudyPlanFields:
    return StudyPlanFields(
        subject=_clean(first_match(PLAN_SUBJECT_MATCHERS, message)),
        exam_date=_to_iso(first_match(EXAM_DATE_MATCHERS, message), today),
        hours_per_day=extract_hours_per_day(message),
        topics=extract_topics(message),
    )


def extract_note_fields(message: str, today: date) -> NoteFields:
    title = _clean(first_match(NOTE_TITLE_MATCHERS, message))
    return NoteFields(
        title=title or f"Chat note {today.isoformat()}",
        text=first_match(NOTE_TEXT_MATCHERS, message),
    )


_EXTRACTORS = {
    "SCHEDULE": extract_schedule_fields,
    "NOTE_SUMMARY": extract_note_fields,
    "STUDY_PLAN": extract_study_plan_fields,
    "TASK": extract_task_fields,
    "STUDY_SESSION": extract_study_session_fields,
}


def extract(message: str, intent: str, today: date) -> Optional[ExtractedFields]:
    """Extract the fields a creation intent needs; None for informational messages."""
    extractor = _EXTRACTORS.get(intent)
    if extractor is None:
        return None
    return extractor(message, today)
