"""Rule-based intent classification for chat messages."""
import re
from typing import Callable, List, Literal, Tuple

IntentType = Literal["SCHEDULE", "NOTE_SUMMARY", "STUDY_PLAN", "TASK", "STUDY_SESSION", "INFORMATIONAL"]

WEEKDAY_PATTERN = r"\b(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b"


class IntentClassifier:
    """Fixed-priority rule classifier - the first matching intent wins."""

    def __init__(self):
        # Questions about existing data never create anything
        self.query_patterns = [
            r"^(?:what|what's|whats|when|which|where|show|list|tell\s+me|do\s+i\s+have|how\s+many|how\s+much)\b",
        ]
        # Question-led messages that ask to create something are not queries, unless they end in "?"
        self.creation_patterns = [
            r"\b(?:add|create|make|set|put|remind|log|summari[sz]e)\b",
        ]

        # SCHEDULE needs one of these AND a temporal cue
        self.schedule_patterns = [
            r"\breminders?\b",
            r"\bremind\s+me\s+(?:about|of)\b",
            r"(?<!study\s)\bschedule\b",
            r"\bcalendar\b",
            r"\btimetable\b",
            r"\b(?:add|set|put)\s+(?:(?!task|todo|assignment|homework)[\w&+\-']+\s+){0,3}(?:class|lecture|lab|seminar|tutorial|quiz|exam|test|midterm)\b",
        ]
        self.temporal_patterns = [
            r"\b(?:at|on)\b",
            WEEKDAY_PATTERN,
            r"\b(?:tomorrow|today|tonight)\b",
            r"\b\d{1,2}(?::\d{2})?\s*[ap]\.?m\b",
        ]

        # NOTE_SUMMARY needs one of these AND some note text or a note reference
        self.note_patterns = [
            r"\bsummari[sz]e\b",
            r"\bsummary\s+of\b",
            r"\bkey\s+points\b",
            r"\b(?:make|create|generate)\s+flashcards\b",
        ]
        self.note_reference_patterns = [
            r"\bnotes?\b",
            r":\s*\S",
        ]

        # STUDY_PLAN
        self.study_plan_patterns = [
            r"\bstudy\s+plan\b",
            r"\bstudy\s+schedule\b",
            r"\bplan\b.*\bfor\b.*\b(?:exam|test|quiz|midterm|final)\b",
            r"\bprepare\s+(?:me\s+)?for\b.*\b(?:exam|test|quiz|midterm|final)\b",
            r"\brevision\s+plan\b",
        ]

        # TASK
        self.task_patterns = [
            r"\b(?:add|create|make|new)\b[^.?!]*\b(?:task|todo|to-do|assignment|homework|essay|project)\b",
            r"\bremind\s+me\s+to\b",
            r"\b(?:i\s+need\s+to|i\s+have\s+to|i\s+must|don'?t\s+forget\s+to)\b",
        ]

        # STUDY_SESSION needs one of these AND a duration
        self.study_session_patterns = [
            r"\bstudied\b",
            r"\bstudy(?:ing)?\s+session\b",
            r"\blog(?:ged)?\b.*\bstudy",
            r"\bspent\b.*\bstudying\b",
        ]
        self.duration_patterns = [
            r"\d+(?:\.\d+)?\s*-?\s*(?:hours?|hrs?|h|minutes?|mins?)\b",
        ]

        self.rules: List[Tuple[IntentType, Callable[[str], bool]]] = [
            ("SCHEDULE", self.is_schedule),
            ("NOTE_SUMMARY", self.is_note_summary),
            ("STUDY_PLAN", self.is_study_plan),
            ("TASK", self.is_task),
            ("STUDY_SESSION", self.is_study_session),
        ]

    @staticmethod
    def _any(patterns: List[str], text: str) -> bool:
        return any(re.search(pattern, text) for pattern in patterns)

    def is_query(self, text: str) -> bool:
        if not self._any(self.query_patterns, text):
            return False
        return text.endswith("?") or not self._any(self.creation_patterns, text)

    def is_schedule(self, text: str) -> bool:
        return self._any(self.schedule_patterns, text) and self._any(self.temporal_patterns, text)

    def is_note_summary(self, text: str) -> bool:
        return self._any(self.note_patterns, text) and self._any(self.note_reference_patterns, text)

    def is_study_plan(self, text: str) -> bool:
        return self._any(self.study_plan_patterns, text)

    def is_task(self, text: str) -> bool:
        if self.is_schedule(text) or self.is_study_plan(text):
            return False
        return self._any(self.task_patterns, text)

    def is_study_session(self, text: str) -> bool:
        if self.is_schedule(text) or self.is_study_plan(text):
            return False
        return self._any(self.study_session_patterns, text) and self._any(self.duration_patterns, text)

    def classify(self, message: str) -> IntentType:
        """Return the first intent whose rule matches, else INFORMATIONAL."""
        message_lower = message.lower().strip()
        if self.is_query(message_lower):
            return "INFORMATIONAL"

        for intent, predicate in self.rules:
            if predicate(message_lower):
                return intent

        return "INFORMATIONAL"

# Global instance
intent_classifier = IntentClassifier()
