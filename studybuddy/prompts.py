"""Prompt texts for the chat and summarization LLM calls."""
from datetime import date
from typing import List, Optional

from .date_resolver import parse_date
from .models import UserContext


class PromptTemplates:
    """System prompts and context lines sent to the LLM."""

    @staticmethod
    def get_assistant_prompt() -> str:
        return """You are Budi, an AI study assistant that helps students with their academic journey. You are friendly, encouraging and knowledgeable about academic subjects.

You can:
- Help with study plans and exam preparation
- Explain complex concepts in simple terms
- Give motivation and study tips
- Help with note-taking and summarization
- Help with time management and scheduling
- Answer questions about the student's uploaded notes

Keep responses concise but helpful. Use an emoji occasionally. If you don't know something, say so and suggest where to look."""

    @staticmethod
    def get_summary_prompt() -> str:
        return """You create study materials. Summarize the given text and reply with JSON only:
{
  "summary": "A concise 2-3 sentence summary",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
  "flashcards": [
    {"question": "Question 1", "answer": "Answer 1"},
    {"question": "Question 2", "answer": "Answer 2"}
  ]
}

Keep the summary under 150 words, include 3-5 key points and 2-4 flashcards."""

    @staticmethod
    def get_summary_request(text: str, title: str) -> str:
        return f'Please create study materials for this text titled "{title}":\n\n{text}'

    @staticmethod
    def build_context_line(context: UserContext, today: date,
                           file_names: Optional[List[str]] = None) -> str:
        """One-line summary of what the student has going on."""
        info = []

        if context.full_name:
            info.append(f"Student name: {context.full_name}")

        if context.today_classes:
            info.append("Today's classes: " + ", ".join(item.subject for item in context.today_classes))

        urgent = []
        for task in context.upcoming_tasks:
            due = parse_date(task.due_date) if task.due_date else None
            if due and (due - today).days <= 3:
                urgent.append(task.title)
        if urgent:
            info.append("Urgent tasks: " + ", ".join(urgent))

        if context.recent_notes:
            info.append("Recent notes: " + ", ".join(note.title for note in context.recent_notes))

        if file_names:
            info.append("Uploaded files: " + ", ".join(file_names))

        return f"Context: {' | '.join(info)}" if info else ""

# Global instance
prompt_templates = PromptTemplates()
