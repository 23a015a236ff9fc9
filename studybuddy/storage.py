"""Per-user study records with Redis persistence and an in-memory fallback."""
import json
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Type, TypeVar

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError

from .config import config
from .date_resolver import WEEKDAYS
from .errors import PersistenceError
from .models import Note, Record, ScheduleItem, StudyPlan, StudySession, StudyTask, Task, UserContext
from .study_plan import compute_progress

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)

TABLES = {
    "classes": ScheduleItem,
    "tasks": Task,
    "notes": Note,
    "study_sessions": StudySession,
    "study_plans": StudyPlan,
}


class StudyStore:
    """Tables of records keyed by user.

    Every write lands in process memory; when ``redis_url`` is configured the
    table is also mirrored to Redis as a JSON list under ``study:<table>:<user>``.
    """

    def __init__(self):
        self.redis_client = None
        self._redis_checked = False
        self._memory_fallback: Dict[str, Dict[str, List[Dict]]] = {name: {} for name in TABLES}

    async def _init_redis(self):
        """Connect to Redis once; stay in memory if it is unavailable."""
        if self.redis_client or self._redis_checked:
            return
        self._redis_checked = True
        if not config.redis_url:
            return

        try:
            self.redis_client = redis.from_url(config.redis_url)
            await self.redis_client.ping()
            logger.info("Study store connected to Redis")
        except Exception as e:
            logger.warning(f"Study store Redis unavailable, using memory: {e}")
            self.redis_client = None

    def _table_key(self, table: str, user_id: str) -> str:
        return f"study:{table}:{user_id}"

    async def _load(self, table: str, user_id: str) -> List[Dict]:
        await self._init_redis()

        rows = []
        if self.redis_client:
            try:
                rows_json = await self.redis_client.get(self._table_key(table, user_id))
                rows = json.loads(rows_json) if rows_json else []
            except Exception as e:
                logger.warning(f"Redis read error: {e}")

        if not rows:
            rows = self._memory_fallback[table].get(user_id, [])
        return list(rows)

    async def _save(self, table: str, user_id: str, rows: List[Dict]):
        if self.redis_client:
            try:
                await self.redis_client.set(self._table_key(table, user_id), json.dumps(rows))
            except Exception as e:
                logger.warning(f"Redis write error: {e}")

        self._memory_fallback[table][user_id] = rows

    async def _rows(self, table: str, user_id: str) -> List[Record]:
        model: Type[BaseModel] = TABLES[table]
        return [model.model_validate(row) for row in await self._load(table, user_id)]

    async def _insert(self, table: str, user_id: str, record: RecordT) -> RecordT:
        if not user_id:
            raise PersistenceError(f"Cannot write to {table} without a user id")

        try:
            stored = TABLES[table].model_validate({**record.model_dump(), "user_id": user_id})
        except ValidationError as e:
            raise PersistenceError(f"Invalid {table} record: {e}") from e

        rows = await self._load(table, user_id)
        rows.append(stored.model_dump(mode="json"))
        await self._save(table, user_id, rows)
        logger.info(f"Created {table} record {stored.id} for user {user_id}")
        return stored

    async def _replace(self, table: str, user_id: str, record: Record):
        rows = [
            record.model_dump(mode="json") if row.get("id") == record.id else row
            for row in await self._load(table, user_id)
        ]
        await self._save(table, user_id, rows)

    # Schedule
    async def create_schedule_item(self, user_id: str, item: ScheduleItem) -> ScheduleItem:
        return await self._insert("classes", user_id, item)

    async def list_schedule(self, user_id: str) -> List[ScheduleItem]:
        items = await self._rows("classes", user_id)
        return sorted(items, key=lambda item: WEEKDAYS.index(item.day_of_week))

    async def get_today_classes(self, user_id: str, today: date) -> List[ScheduleItem]:
        day_name = WEEKDAYS[today.weekday()]
        return [item for item in await self._rows("classes", user_id) if item.day_of_week == day_name]

    # Tasks
    async def create_task(self, user_id: str, task: Task) -> Task:
        return await self._insert("tasks", user_id, task)

    async def list_tasks(self, user_id: str) -> List[Task]:
        return await self._rows("tasks", user_id)

    async def get_upcoming_tasks(self, user_id: str, today: date, limit: int = 5) -> List[Task]:
        """Incomplete tasks due today or later, soonest first."""
        cutoff = today.isoformat()
        tasks = [
            task for task in await self._rows("tasks", user_id)
            if not task.completed and task.due_date and task.due_date >= cutoff
        ]
        tasks.sort(key=lambda task: task.due_date)
        return tasks[:limit]

    async def toggle_task(self, user_id: str, task_id: str) -> Optional[Task]:
        for task in await self._rows("tasks", user_id):
            if task.id == task_id:
                task.completed = not task.completed
                task.completed_at = datetime.utcnow().isoformat() if task.completed else None
                await self._replace("tasks", user_id, task)
                return task
        return None

    # Notes
    async def create_note(self, user_id: str, note: Note) -> Note:
        return await self._insert("notes", user_id, note)

    async def list_notes(self, user_id: str) -> List[Note]:
        notes = await self._rows("notes", user_id)
        return sorted(notes, key=lambda note: note.created_at, reverse=True)

    async def get_recent_notes(self, user_id: str, limit: int = 3) -> List[Note]:
        return (await self.list_notes(user_id))[:limit]

    # Study sessions
    async def create_study_session(self, user_id: str, session: StudySession) -> StudySession:
        return await self._insert("study_sessions", user_id, session)

    async def list_study_sessions(self, user_id: str) -> List[StudySession]:
        sessions = await self._rows("study_sessions", user_id)
        return sorted(sessions, key=lambda session: session.session_date, reverse=True)

    # Study plans
    async def create_study_plan(self, user_id: str, plan: StudyPlan) -> StudyPlan:
        return await self._insert("study_plans", user_id, plan)

    async def list_study_plans(self, user_id: str) -> List[StudyPlan]:
        plans = await self._rows("study_plans", user_id)
        return sorted(plans, key=lambda plan: plan.created_at, reverse=True)

    async def toggle_study_task(self, user_id: str, task_id: str) -> Optional[StudyTask]:
        """Flip a study task and refresh its day and plan completion."""
        for plan in await self._rows("study_plans", user_id):
            for day in plan.days:
                for task in day.tasks:
                    if task.id == task_id:
                        task.completed = not task.completed
                        compute_progress(plan)
                        await self._replace("study_plans", user_id, plan)
                        return task
        return None

    async def get_user_context(self, user_id: str, today: date, full_name: Optional[str] = None) -> UserContext:
        """Snapshot used for chat replies."""
        upcoming = await self.get_upcoming_tasks(user_id, today)
        today_classes = await self.get_today_classes(user_id, today)
        notes = await self.list_notes(user_id)
        return UserContext(
            full_name=full_name,
            today_classes=today_classes,
            upcoming_tasks=upcoming,
            recent_notes=notes[:3],
            study_plans=await self.list_study_plans(user_id),
            class_count=len(today_classes),
            task_count=len(upcoming),
            note_count=len(notes),
        )

    async def clear_user_data(self, user_id: str):
        await self._init_redis()
        for table in TABLES:
            if self.redis_client:
                try:
                    await self.redis_client.delete(self._table_key(table, user_id))
                except Exception as e:
                    logger.warning(f"Redis delete error: {e}")
            self._memory_fallback[table].pop(user_id, None)

# Global instance
store = StudyStore()
