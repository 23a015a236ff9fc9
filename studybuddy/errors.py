"""Exceptions raised by the study assistant collaborators."""


class StudyBuddyError(Exception):
    """Base error for the study assistant."""


class PersistenceError(StudyBuddyError):
    """A record could not be written to the study store."""


class SummarizationError(StudyBuddyError):
    """The LLM returned no usable note summary."""


class UnsupportedFileError(StudyBuddyError):
    """An uploaded file has an unsupported type or is too large."""
