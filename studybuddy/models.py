"""Domain models shared by the interpreter, the store and the API."""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .date_resolver import canonical_day_name, format_time, is_weekday

Priority = Literal["low", "medium", "high"]
ScheduleType = Literal["class", "exam", "reminder"]
StudyTaskType = Literal["reading", "practice", "review", "quiz"]


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.utcnow().isoformat()


class Record(BaseModel):
    """Fields every stored row carries."""
    id: str = Field(default_factory=new_id)
    user_id: Optional[str] = None
    created_at: str = Field(default_factory=utc_now)


class TimeOfDay(BaseModel):
    hour: int = Field(ge=1, le=12)
    minute: int = Field(default=0, ge=0, le=59)
    meridiem: Literal["AM", "PM"]

    @field_validator("meridiem", mode="before")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    def label(self) -> str:
        return format_time(self.hour, self.minute, self.meridiem)


class ParsedScheduleRequest(BaseModel):
    time_match: Optional[TimeOfDay] = None
    day_match: Optional[str] = None
    subject_match: Optional[str] = None
    raw_message: str = ""


class ScheduleItem(Record):
    subject: str = Field(min_length=1)
    time_slot: str = Field(min_length=1)
    day_of_week: str
    room: Optional[str] = None
    type: ScheduleType = "class"
    notifications: bool = True

    @field_validator("day_of_week")
    @classmethod
    def _canonical_day(cls, value: str) -> str:
        if not is_weekday(value):
            raise ValueError(f"{value!r} is not a day of the week")
        return canonical_day_name(value)


class Task(Record):
    title: str = Field(min_length=1)
    subject: Optional[str] = None
    due_date: Optional[str] = None
    priority: Priority = "medium"
    estimated_hours: float = 1.0
    completed: bool = False
    completed_at: Optional[str] = None


class StudySession(Record):
    subject: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0)
    session_date: str
    notes: Optional[str] = None


class StudyPlanRequest(BaseModel):
    subject: str = Field(min_length=1)
    exam_date: str
    hours_per_day: float = Field(gt=0)
    topics: Optional[str] = None


class StudyTask(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    duration_minutes: int = Field(ge=0)
    task_type: StudyTaskType
    priority: Priority
    completed: bool = False


class StudyDay(BaseModel):
    id: str = Field(default_factory=new_id)
    day_number: int = Field(ge=1)
    date: str
    total_hours: float
    tasks: List[StudyTask] = Field(default_factory=list)
    completed: bool = False


class StudyPlan(Record):
    subject: str
    exam_date: str
    hours_per_day: float
    topics: Optional[str] = None
    total_days: int
    progress: int = 0
    days: List[StudyDay] = Field(default_factory=list)


class Flashcard(BaseModel):
    question: str
    answer: str


class NoteSummary(BaseModel):
    summary: str
    key_points: List[str] = Field(default_factory=list, alias="keyPoints")
    flashcards: List[Flashcard] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class Note(Record):
    title: str = Field(min_length=1)
    original_text: Optional[str] = None
    summary: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    flashcards: List[Flashcard] = Field(default_factory=list)
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    upload_type: str = "text"


class NoteDraft(BaseModel):
    """A note body waiting for summarization."""
    title: str
    text: str


class ChatExchange(BaseModel):
    message: str
    response: str
    context: Dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now)


class UserContext(BaseModel):
    full_name: Optional[str] = None
    today_classes: List[ScheduleItem] = Field(default_factory=list)
    upcoming_tasks: List[Task] = Field(default_factory=list)
    recent_notes: List[Note] = Field(default_factory=list)
    study_plans: List[StudyPlan] = Field(default_factory=list)
    class_count: int = 0
    task_count: int = 0
    note_count: int = 0


class ClarificationNeeded(BaseModel):
    """Returned instead of a command when required fields are missing."""
    reason: Literal["parse_failure", "invalid_date", "persistence_failure"] = "parse_failure"
    message: str


class InformationalQuery(BaseModel):
    """A message that matched no creation intent."""
    message: str


CommandKind = Literal[
    "create_schedule_item",
    "create_note",
    "create_study_plan",
    "create_task",
    "create_study_session",
]


class PersistenceCommand(BaseModel):
    kind: CommandKind
    payload: Union[ScheduleItem, Note, NoteDraft, StudyPlan, Task, StudySession]


class ChatResult(BaseModel):
    response_text: str
    side_effect: Optional[PersistenceCommand] = None
