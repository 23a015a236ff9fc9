"""Note summarization: LLM first, deterministic extractive fallback."""
import json
import logging
import re
from typing import List

from pydantic import ValidationError

from .config import config
from .errors import SummarizationError
from .llm_client import llm_client
from .models import Flashcard, NoteSummary
from .prompts import prompt_templates

logger = logging.getLogger(__name__)

KEY_POINT_LABELS = ("Main concept", "Important detail", "Additional point")
APPLICATION_WORDS = ("example", "formula", "method")


def _sentences(text: str) -> List[str]:
    return [sentence.strip() for sentence in re.split(r"[.!?]+", text) if sentence.strip()]


def extractive_summary(text: str, title: str) -> NoteSummary:
    """Summary built from leading and trailing sentences, no LLM involved."""
    words = text.split()
    sentences = _sentences(text)

    if len(words) > 100:
        summary = ". ".join(sentences[:3])
        if len(sentences) > 3:
            summary += ". " + sentences[-1]
        summary += "."
    else:
        summary = " ".join(words[:50]) + ("..." if len(words) > 50 else "")

    key_points = [f"{label}: {sentence}" for label, sentence in zip(KEY_POINT_LABELS, sentences)]
    if len(sentences) >= 4:
        key_points.append(f"Conclusion: {sentences[-1]}")

    flashcards = []
    if sentences:
        flashcards.append(Flashcard(
            question=f'What is the main topic discussed in "{title}"?',
            answer=sentences[0],
        ))
    if len(key_points) > 1:
        flashcards.append(Flashcard(
            question="What are the key points covered?",
            answer="; ".join(point.split(": ", 1)[1] for point in key_points),
        ))

    lowered = text.lower()
    if any(word in lowered for word in APPLICATION_WORDS):
        flashcards.append(Flashcard(
            question=f'How would you apply the concepts from "{title}"?',
            answer="Apply the methods and examples discussed in practical scenarios",
        ))

    return NoteSummary(summary=summary, key_points=key_points, flashcards=flashcards)


def parse_summary(content: str) -> NoteSummary:
    """Validate an LLM JSON reply."""
    if not content:
        raise SummarizationError("Empty summary response")

    # Models sometimes wrap JSON in a code fence
    match = re.search(r"\{.*\}", content, re.DOTALL)
    if not match:
        raise SummarizationError("No JSON object in summary response")

    try:
        summary = NoteSummary.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise SummarizationError(f"Malformed summary response: {e}") from e

    if not summary.summary.strip():
        raise SummarizationError("Summary response has no summary text")
    return summary


async def summarize(text: str, title: str) -> NoteSummary:
    """Summary, key points and flashcards for a note. Always returns a result."""
    if llm_client.enabled:
        messages = [
            {"role": "system", "content": prompt_templates.get_summary_prompt()},
            {"role": "user", "content": prompt_templates.get_summary_request(text, title)},
        ]
        result = await llm_client.complete(messages, temperature=config.summary_temperature, json_mode=True)
        try:
            return parse_summary(result["content"])
        except SummarizationError as e:
            logger.warning(f"Falling back to extractive summary for '{title}': {e}")

    return extractive_summary(text, title)
