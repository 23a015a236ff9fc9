"""Ordered first-match extractors.

A field extractor is a list of matchers tried in sequence; the first one that
produces a non-empty value wins. Nothing is scored or merged across matchers.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Union


def _first_group(match: re.Match) -> Optional[str]:
    value = match.group(1)
    return value.strip() if value else None


@dataclass(frozen=True)
class Pattern:
    """A regular expression plus a transform applied to its first match."""
    regex: re.Pattern
    transform: Callable[[re.Match], Any] = _first_group

    @classmethod
    def compile(cls, pattern: str, transform: Callable[[re.Match], Any] = _first_group,
                flags: int = re.IGNORECASE) -> "Pattern":
        return cls(re.compile(pattern, flags), transform)

    def match(self, text: str) -> Any:
        found = self.regex.search(text)
        if not found:
            return None
        return self.transform(found)


@dataclass(frozen=True)
class Literal:
    """A set of whole-word phrases mapped to a constant value."""
    phrases: Sequence[str]
    value: Any

    def match(self, text: str) -> Any:
        lowered = text.lower()
        if any(re.search(rf"\b{re.escape(phrase)}\b", lowered) for phrase in self.phrases):
            return self.value
        return None


Matcher = Union[Pattern, Literal]


def first_match(matchers: Iterable[Matcher], text: str, default: Any = None) -> Any:
    """Return the first non-empty value produced by ``matchers``."""
    for matcher in matchers:
        value = matcher.match(text)
        if value not in (None, ""):
            return value
    return default
