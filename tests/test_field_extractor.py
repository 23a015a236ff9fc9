from studybuddy.field_extractor import (
    NoteFields,
    ScheduleFields,
    extract,
    extract_duration_minutes,
    extract_hours_per_day,
    extract_note_fields,
    extract_priority,
    extract_schedule_fields,
    extract_study_plan_fields,
    extract_study_session_fields,
    extract_task_fields,
    extract_time,
    extract_topics,
    parse_schedule_request,
)


def test_reminder_for_quiz_tomorrow(today):
    fields = extract_schedule_fields("Set a reminder for my Math quiz tomorrow at 2 PM", today)
    assert "Math" in fields.subject
    assert fields.time_slot == "2:00 PM"
    assert fields.day_of_week == "Tuesday"
    assert fields.type == "exam"
    assert fields.missing() == []


def test_schedule_class_with_minutes(today):
    fields = extract_schedule_fields("Add my Chemistry lab on Thursday at 10:30 AM", today)
    assert fields.subject == "Chemistry lab"
    assert fields.time_slot == "10:30 AM"
    assert fields.day_of_week == "Thursday"
    assert fields.type == "class"


def test_schedule_without_time_reports_missing(today):
    fields = extract_schedule_fields("Add my Chemistry lab on Thursday", today)
    assert fields.missing() == ["time_slot"]


def test_parse_schedule_request_keeps_raw_captures():
    parsed = parse_schedule_request("remind me about the Physics lecture next friday at 9am")
    assert parsed.day_match == "next friday"
    assert parsed.time_match.label() == "9:00 AM"


def test_time_prefers_explicit_minutes():
    assert extract_time("at 3:45 pm, not 4 pm").label() == "3:45 PM"
    assert extract_time("at 4 p.m.").label() == "4:00 PM"
    assert extract_time("at 13 pm") is None


def test_priority_keywords():
    assert extract_priority("finish this asap") == "high"
    assert extract_priority("it's urgent") == "high"
    assert extract_priority("read it when I have time") == "low"
    assert extract_priority("read chapter 2") == "medium"


def test_task_from_add_task(today):
    fields = extract_task_fields("Add a task: finish the lab report by Friday", today)
    assert fields.title == "finish the lab report"
    assert fields.due_date == "2026-10-23"
    assert fields.priority == "medium"
    assert fields.estimated_hours == 1.0


def test_task_from_need_to_with_subject(today):
    fields = extract_task_fields("I need to finish my History essay by Friday, it's urgent", today)
    assert fields.title == "finish my History essay"
    assert fields.subject == "History"
    assert fields.priority == "high"


def test_task_due_in_days_and_estimate(today):
    fields = extract_task_fields("Remind me to read chapter 5 in 3 days, takes 2 hours", today)
    assert fields.title == "read chapter 5"
    assert fields.due_date == "2026-10-22"
    assert fields.estimated_hours == 2.0


def test_task_without_title_is_missing(today):
    fields = extract_task_fields("add a task", today)
    assert fields.title is None
    assert fields.missing() == ["title"]


def test_study_session_minutes_and_notes(today):
    fields = extract_study_session_fields("studied Biology for 90 minutes on photosynthesis", today)
    assert "Biology" in fields.subject
    assert fields.duration_minutes == 90
    assert fields.notes == "photosynthesis"
    assert fields.session_date == "2026-10-19"


def test_study_session_hours_strip_exam_word(today):
    fields = extract_study_session_fields("add a 2 hour study session for my Physics exam", today)
    assert fields.subject == "Physics"
    assert fields.duration_minutes == 120


def test_study_session_yesterday(today):
    fields = extract_study_session_fields("I studied Chemistry yesterday for 1.5 hours", today)
    assert fields.subject == "Chemistry"
    assert fields.duration_minutes == 90
    assert fields.session_date == "2026-10-18"


def test_duration_defaults_to_an_hour():
    assert extract_duration_minutes("studied a bit") == 60


def test_study_plan_fields(today):
    fields = extract_study_plan_fields(
        "Create a study plan for Biology exam on 2026-11-02, 3 hours per day, topics: cells, genetics", today)
    assert fields.subject == "Biology"
    assert fields.exam_date == "2026-11-02"
    assert fields.hours_per_day == 3.0
    assert fields.topics == "cells, genetics"


def test_study_plan_relative_exam_date(today):
    fields = extract_study_plan_fields("Make a study plan for Calculus final next Friday", today)
    assert fields.subject == "Calculus"
    assert fields.exam_date == "2026-10-23"
    assert fields.hours_per_day == 2


def test_study_plan_missing_date(today):
    fields = extract_study_plan_fields("Create a study plan for Biology", today)
    assert fields.subject == "Biology"
    assert fields.missing() == ["exam_date"]


def test_topics_and_hours_helpers():
    assert extract_topics("topics: limits, derivatives and integrals") == "limits, derivatives, integrals"
    assert extract_topics("nothing to see here") is None
    assert extract_hours_per_day("I can do 1.5 hours a day") == 1.5


def test_note_fields(today):
    fields = extract_note_fields(
        "Summarize my notes on Photosynthesis: Plants convert light energy into chemical energy.", today)
    assert fields.title == "Photosynthesis"
    assert fields.text == "Plants convert light energy into chemical energy."


def test_note_without_body(today):
    fields = extract_note_fields("summarize my notes", today)
    assert fields.title == "Chat note 2026-10-19"
    assert fields.missing() == ["text"]


def test_extract_dispatches_on_intent(today):
    assert isinstance(extract("Set a reminder for Math at 2 PM tomorrow", "SCHEDULE", today), ScheduleFields)
    assert isinstance(extract("summarize: text", "NOTE_SUMMARY", today), NoteFields)
    assert extract("hello", "INFORMATIONAL", today) is None


def test_fractional_minutes_are_rounded():
    assert extract_duration_minutes("studied Biology for 7.6 minutes") == 8
