"""Canned chat responses: informational answers, clarifications and confirmations."""
import re
from typing import List, Optional, Tuple

from .models import Note, PersistenceCommand, ScheduleItem, StudyPlan, StudySession, Task, UserContext

# Checked in order, first substring hit wins
TOPIC_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("schedule", ("schedule", "remind", "class", "classes", "calendar")),
    ("tasks", ("task", "todo", "to-do", "assignment", "homework", "deadline")),
    ("notes", ("note", "summarize", "summary", "flashcard")),
    ("study_plan", ("study plan", "exam", "revision")),
    ("explain", ("explain", "help me understand", "what is", "how does")),
    ("motivation", ("motivat", "tired", "stressed", "overwhelmed", "procrastinat", "give up")),
]

CLARIFICATIONS = {
    "SCHEDULE": (
        "I couldn't quite work out the {missing} for that. Try something like:\n"
        "- \"Set a reminder for my Math quiz tomorrow at 2 PM\"\n"
        "- \"Add my Chemistry lab on Thursday at 10:30 AM\""
    ),
    "TASK": (
        "I need a bit more detail to create that task. Try something like:\n"
        "- \"Add a task: finish the Physics lab report by Friday\"\n"
        "- \"Remind me to submit my History essay in 3 days, high priority\""
    ),
    "STUDY_PLAN": (
        "To build a study plan I need the {missing}. Try something like:\n"
        "- \"Create a study plan for my Biology exam on 2026-12-01, 3 hours per day\"\n"
        "- \"Make a study plan for Calculus final next Friday, topics: limits, derivatives\""
    ),
    "STUDY_SESSION": (
        "I couldn't log that study session. Try something like:\n"
        "- \"I studied Biology for 90 minutes on photosynthesis\"\n"
        "- \"Log a 2 hour study session for my Physics exam\""
    ),
    "NOTE_SUMMARY": (
        "Paste the note after a colon and I'll summarize it, for example:\n"
        "- \"Summarize my notes on Photosynthesis: Plants convert light energy into ...\""
    ),
}

PERSISTENCE_FAILURE = (
    "I understood your request but couldn't save it right now. "
    "Please try again in a moment, or add it from the dashboard."
)

CANNED = {
    "schedule": (
        "I can help you manage your schedule! Tell me something like "
        "\"Add my Math class on Monday at 9 AM\" and I'll put it on your calendar."
    ),
    "tasks": (
        "I can keep track of your assignments. Say \"Add a task: read chapter 4 by Friday\" "
        "and I'll add it with a due date and priority."
    ),
    "notes": (
        "I'd be happy to help summarize your notes! Paste them after a colon, e.g. "
        "\"Summarize my notes on Cells: ...\", or upload a PDF, DOCX or PPTX file. "
        "I'll create a summary, key points and flashcards."
    ),
    "study_plan": (
        "Creating a personalized study plan is one of my specialties! Tell me the subject, "
        "the exam date and how many hours a day you can study, and I'll lay out every day until the exam."
    ),
    "explain": (
        "I'm great at breaking down complex concepts into simple explanations! Ask me about any "
        "subject and I'll walk you through it step by step with examples."
    ),
    "motivation": (
        "You've got this! Break the work into small pieces, start with a 25 minute session, "
        "and take a short break after each one. Progress beats perfection."
    ),
}


def _plural(count: int, word: str) -> str:
    if count == 1:
        return f"{count} {word}"
    return f"{count} {word}es" if word.endswith("s") else f"{count} {word}s"


class Responder:
    """Picks and renders informational replies."""

    def match(self, message: str) -> Optional[str]:
        lowered = message.lower()
        for topic, keywords in TOPIC_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return topic
        return None

    def render(self, topic: Optional[str], context: UserContext) -> str:
        if topic == "schedule" and context.today_classes:
            classes = ", ".join(f"{item.subject} at {item.time_slot}" for item in context.today_classes)
            return f"Today you have {classes}. " + CANNED["schedule"]
        if topic == "tasks" and context.upcoming_tasks:
            tasks = ", ".join(
                f"{task.title} (due {task.due_date})" if task.due_date else task.title
                for task in context.upcoming_tasks[:3]
            )
            return f"Your next tasks: {tasks}. " + CANNED["tasks"]
        if topic == "notes" and context.recent_notes:
            titles = ", ".join(note.title for note in context.recent_notes[:3])
            return f"Your recent notes: {titles}. " + CANNED["notes"]
        if topic == "study_plan" and context.study_plans:
            plan = context.study_plans[0]
            return (
                f"Your {plan.subject} plan is {plan.progress}% complete with the exam on {plan.exam_date}. "
                + CANNED["study_plan"]
            )
        if topic in CANNED:
            return CANNED[topic]
        return self.default(context)

    def default(self, context: UserContext) -> str:
        name = context.full_name.split()[0] if context.full_name else "there"
        return (
            f"Hi {name}! You have {_plural(context.class_count, 'class')} today, "
            f"{_plural(context.task_count, 'upcoming task')} and {_plural(context.note_count, 'note')}. "
            "I can schedule classes, track tasks, summarize notes, log study sessions "
            "and build study plans. What would you like to work on?"
        )

    def clarification(self, intent: str, missing: List[str]) -> str:
        template = CLARIFICATIONS.get(intent, CANNED["explain"])
        fields = " and ".join(re.sub("_", " ", name) for name in missing) or "details"
        return template.format(missing=fields)

    def confirmation(self, command: PersistenceCommand) -> str:
        """Text confirming the record a command saved."""
        record = command.payload
        if isinstance(record, ScheduleItem):
            return (
                f"Done! I've added {record.subject} ({record.type}) to your schedule "
                f"on {record.day_of_week} at {record.time_slot}."
            )
        if isinstance(record, Task):
            due = f", due {record.due_date}" if record.due_date else ""
            return f"Added task \"{record.title}\" ({record.priority} priority{due})."
        if isinstance(record, StudySession):
            return f"Logged {record.duration_minutes} minutes of {record.subject} on {record.session_date}. Nice work!"
        if isinstance(record, StudyPlan):
            first = record.days[0].tasks[0].title if record.days and record.days[0].tasks else ""
            return (
                f"Your {record.total_days}-day study plan for {record.subject} is ready "
                f"(exam on {record.exam_date}, {record.hours_per_day:g} hours per day). "
                f"Day 1 starts with: {first}."
            )
        if isinstance(record, Note):
            points = "\n".join(f"- {point}" for point in record.key_points)
            text = f"Saved \"{record.title}\".\n\nSummary: {record.summary}"
            return f"{text}\n\nKey points:\n{points}" if points else text
        return "Saved."

# Global instance
responder = Responder()
