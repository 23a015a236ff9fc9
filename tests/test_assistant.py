from datetime import timedelta

import pytest

from studybuddy import assistant as assistant_module
from studybuddy.assistant import StudyAssistant
from studybuddy.errors import PersistenceError
from studybuddy.interpreter import interpret
from studybuddy.memory import chat_history
from studybuddy.models import (
    ClarificationNeeded,
    InformationalQuery,
    Note,
    PersistenceCommand,
    ScheduleItem,
    StudyPlan,
    StudyPlanRequest,
    StudySession,
    Task,
)
from studybuddy.responses import PERSISTENCE_FAILURE
from studybuddy.storage import store


@pytest.fixture
def assistant():
    return StudyAssistant()


def test_interpret_schedule_command(today):
    command = interpret("Set a reminder for my Math quiz tomorrow at 2 PM", today)
    assert isinstance(command, PersistenceCommand)
    assert command.kind == "create_schedule_item"
    assert isinstance(command.payload, ScheduleItem)
    assert command.payload.day_of_week == "Tuesday"


def test_interpret_study_session_command(today):
    command = interpret("studied Biology for 90 minutes on photosynthesis", today)
    assert command.kind == "create_study_session"
    assert isinstance(command.payload, StudySession)
    assert command.payload.duration_minutes == 90


def test_interpret_study_plan_command(today):
    command = interpret("Create a study plan for Biology exam on 2026-11-02, 3 hours per day", today)
    assert command.kind == "create_study_plan"
    assert isinstance(command.payload, StudyPlan)
    assert command.payload.total_days == 14


def test_interpret_exam_today_is_invalid_date(today):
    result = interpret(f"Create a study plan for Biology exam on {today.isoformat()}", today)
    assert isinstance(result, ClarificationNeeded)
    assert result.reason == "invalid_date"


def test_interpret_task_without_title_asks_for_clarification(today):
    result = interpret("add a task", today)
    assert isinstance(result, ClarificationNeeded)
    assert result.reason == "parse_failure"
    assert "Add a task" in result.message


def test_interpret_informational(today):
    assert isinstance(interpret("hello there", today), InformationalQuery)


async def test_handle_task_message_persists(assistant, user_id, today):
    result = await assistant.handle_message("I need to finish my History essay by Friday", user_id, today)

    assert result.side_effect.kind == "create_task"
    assert isinstance(result.side_effect.payload, Task)
    assert "finish my History essay" in result.response_text
    tasks = await store.list_tasks(user_id)
    assert [task.title for task in tasks] == ["finish my History essay"]
    assert tasks[0].due_date == "2026-10-23"


async def test_handle_clarification_issues_no_command(assistant, user_id, today):
    result = await assistant.handle_message("add a task", user_id, today)
    assert result.side_effect is None
    assert await store.list_tasks(user_id) == []


async def test_handle_note_message_summarizes(assistant, user_id, today):
    result = await assistant.handle_message(
        "Summarize my notes on Photosynthesis: Plants convert light energy. Chlorophyll absorbs light.", user_id, today)

    note = result.side_effect.payload
    assert isinstance(note, Note)
    assert note.title == "Photosynthesis"
    assert note.key_points[0] == "Main concept: Plants convert light energy"
    assert (await store.list_notes(user_id))[0].id == note.id


async def test_persistence_failure_is_reported_not_raised(assistant, user_id, today, monkeypatch):
    async def broken(*args, **kwargs):
        raise PersistenceError("database down")

    monkeypatch.setattr(assistant_module.store, "create_task", broken)
    result = await assistant.handle_message("Add a task: read chapter 4 by Friday", user_id, today)
    assert result.response_text == PERSISTENCE_FAILURE
    assert result.side_effect is None


async def test_informational_default_summarizes_counts(assistant, user_id, today):
    result = await assistant.handle_message("hello", user_id, today, full_name="Sam Lee")
    assert result.response_text.startswith("Hi Sam! You have 0 classes today, 0 upcoming tasks and 0 notes.")


async def test_informational_schedule_lists_today_classes(assistant, user_id, today):
    await store.create_schedule_item(user_id, ScheduleItem(subject="Math", time_slot="2:00 PM", day_of_week="Monday"))
    result = await assistant.handle_message("What classes do I have?", user_id, today)
    assert result.response_text.startswith("Today you have Math at 2:00 PM.")


async def test_informational_explain_prefers_llm(assistant, user_id, today, monkeypatch):
    async def fake_reply(message, context, history=None, today=None, file_names=None):
        return "Photosynthesis turns light into sugar."

    monkeypatch.setattr(assistant_module.llm_client, "chat_reply", fake_reply)
    result = await assistant.handle_message("Can you explain photosynthesis?", user_id, today)
    assert result.response_text == "Photosynthesis turns light into sugar."


async def test_exchanges_are_recorded(assistant, user_id, today):
    await assistant.handle_message("hello", user_id, today)
    await assistant.handle_message("add a task", user_id, today)

    history = await chat_history.get_history(user_id)
    assert [exchange.message for exchange in history] == ["add a task", "hello"]
    assert history[0].context == {"outcome": "parse_failure"}


async def test_generate_study_plan(assistant, user_id, today):
    request = StudyPlanRequest(subject="Chemistry", exam_date=(today + timedelta(days=6)).isoformat(),
                               hours_per_day=2, topics="Acids, Bases")
    plan = await assistant.generate_study_plan(user_id, request, today)
    assert plan.total_days == 6
    assert plan.days[0].tasks[0].title == "Acids - Chemistry"
    assert len(await store.list_study_plans(user_id)) == 1

    past = request.model_copy(update={"exam_date": (today - timedelta(days=1)).isoformat()})
    assert isinstance(await assistant.generate_study_plan(user_id, past, today), ClarificationNeeded)
