"""Chat message handling: interpret, persist, answer, remember."""
import logging
from datetime import date, datetime
from typing import Dict, Optional, Union

from .date_resolver import local_today
from .errors import PersistenceError
from .file_processor import file_processor
from .interpreter import interpret
from .llm_client import llm_client
from .memory import chat_history
from .models import (
    ChatResult,
    ClarificationNeeded,
    InformationalQuery,
    Note,
    NoteDraft,
    PersistenceCommand,
    Record,
    StudyPlan,
    StudyPlanRequest,
)
from .responses import PERSISTENCE_FAILURE, responder
from .storage import store
from .study_plan import build_study_plan
from .summarizer import summarize

logger = logging.getLogger(__name__)

# Informational topics that go to the LLM before the canned text
LLM_TOPICS = (None, "explain")


class StudyAssistant:

    async def handle_message(self, message: str, user_id: str, today: Optional[date] = None,
                             full_name: Optional[str] = None) -> ChatResult:
        """Answer one chat message, saving whatever it asks to create."""
        today = today or local_today()
        interpretation = interpret(message, today)

        if isinstance(interpretation, ClarificationNeeded):
            result = ChatResult(response_text=interpretation.message)
            context = {"outcome": interpretation.reason}
        elif isinstance(interpretation, InformationalQuery):
            result = await self._answer(interpretation, user_id, today, full_name)
            context = {"outcome": "informational"}
        else:
            result = await self._execute(interpretation, user_id)
            context = {"outcome": result.side_effect.kind if result.side_effect else "persistence_failure"}

        await chat_history.add_exchange(user_id, message, result.response_text, context)
        return result

    async def _execute(self, command: PersistenceCommand, user_id: str) -> ChatResult:
        try:
            record = await self._persist(command, user_id)
        except PersistenceError as e:
            logger.error(f"Could not save {command.kind} for user {user_id}: {e}")
            return ChatResult(response_text=PERSISTENCE_FAILURE)

        saved = PersistenceCommand(kind=command.kind, payload=record)
        return ChatResult(response_text=responder.confirmation(saved), side_effect=saved)

    async def _persist(self, command: PersistenceCommand, user_id: str) -> Record:
        payload = command.payload
        if command.kind == "create_schedule_item":
            return await store.create_schedule_item(user_id, payload)
        if command.kind == "create_task":
            return await store.create_task(user_id, payload)
        if command.kind == "create_study_session":
            return await store.create_study_session(user_id, payload)
        if command.kind == "create_study_plan":
            return await store.create_study_plan(user_id, payload)
        if isinstance(payload, NoteDraft):
            return await self.summarize_note(user_id, payload.title, payload.text)
        return await store.create_note(user_id, payload)

    async def _answer(self, query: InformationalQuery, user_id: str, today: date,
                      full_name: Optional[str]) -> ChatResult:
        context = await store.get_user_context(user_id, today, full_name)
        topic = responder.match(query.message)

        if topic in LLM_TOPICS:
            history = await chat_history.get_context_messages(user_id)
            file_names = [f["filename"] for f in file_processor.get_file_context(user_id)]
            reply = await llm_client.chat_reply(query.message, context, history, today, file_names)
            if reply:
                return ChatResult(response_text=reply)

        return ChatResult(response_text=responder.render(topic, context))

    async def generate_study_plan(self, user_id: str, request: StudyPlanRequest,
                                  today: Optional[date] = None) -> Union[StudyPlan, ClarificationNeeded]:
        """Form-driven plan creation; the plan is saved when the date is valid."""
        plan = build_study_plan(request, today or local_today())
        if isinstance(plan, ClarificationNeeded):
            return plan
        return await store.create_study_plan(user_id, plan)

    async def summarize_note(self, user_id: str, title: str, text: str, file_name: Optional[str] = None,
                             file_size: Optional[int] = None, upload_type: str = "text") -> Note:
        """Summarize ``text`` and save it as a note."""
        summary = await summarize(text, title)
        note = Note(
            title=title,
            original_text=text,
            summary=summary.summary,
            key_points=summary.key_points,
            flashcards=summary.flashcards,
            file_name=file_name,
            file_size=file_size,
            upload_type=upload_type,
        )
        return await store.create_note(user_id, note)

    async def get_status(self) -> Dict:
        return {
            "status": "ready",
            "llm_enabled": llm_client.enabled,
            "timestamp": datetime.utcnow().isoformat()
        }

# Global instance
assistant = StudyAssistant()
