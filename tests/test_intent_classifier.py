import pytest

from studybuddy.intent_classifier import IntentClassifier, intent_classifier


@pytest.mark.parametrize("message,intent", [
    ("Set a reminder for my Math quiz tomorrow at 2 PM", "SCHEDULE"),
    ("Add my Chemistry lab on Thursday at 10:30 AM", "SCHEDULE"),
    ("Summarize my notes on Photosynthesis: Plants convert light into energy.", "NOTE_SUMMARY"),
    ("Create a study plan for Biology exam on 2026-11-02, 3 hours per day", "STUDY_PLAN"),
    ("Help me prepare for my Chemistry midterm", "STUDY_PLAN"),
    ("Make me a study schedule for my Physics exam on Friday", "STUDY_PLAN"),
    ("Add a task: finish the lab report by Friday", "TASK"),
    ("Remind me to email my TA tomorrow", "TASK"),
    ("I need to finish my History essay by Friday", "TASK"),
    ("studied Biology for 90 minutes on photosynthesis", "STUDY_SESSION"),
    ("add a 2 hour study session for my Physics exam", "STUDY_SESSION"),
    ("When I have time, add a task to clean my desk", "TASK"),
    ("When is my Math class?", "INFORMATIONAL"),
    ("What's on my schedule today?", "INFORMATIONAL"),
    ("Can you explain photosynthesis?", "INFORMATIONAL"),
    ("hello", "INFORMATIONAL"),
])
def test_classify(message, intent):
    assert intent_classifier.classify(message) == intent


def test_schedule_needs_a_temporal_cue():
    assert intent_classifier.classify("I hate my calendar") == "INFORMATIONAL"
    assert intent_classifier.classify("Put it in my calendar on Friday") == "SCHEDULE"


def test_study_session_needs_a_duration():
    assert intent_classifier.classify("I studied Biology") == "INFORMATIONAL"


def test_task_and_session_exclude_plan_and_schedule_messages():
    classifier = IntentClassifier()
    assert not classifier.is_task("i need to plan for my exam")
    assert not classifier.is_study_session("study session reminder tomorrow at 5 pm for 2 hours")


def test_priority_order_is_schedule_first():
    classifier = IntentClassifier()
    assert [name for name, _ in classifier.rules] == [
        "SCHEDULE", "NOTE_SUMMARY", "STUDY_PLAN", "TASK", "STUDY_SESSION",
    ]
