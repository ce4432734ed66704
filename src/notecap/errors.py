"""Error taxonomy for the note-synthesis pipeline."""

from typing import Optional


class NotecapError(Exception):
    """Base class for every error raised by notecap."""


class ValidationError(NotecapError):
    """Empty or unusable image input, or no text recovered from it."""


class EngineNotReadyError(NotecapError):
    """The OCR engine was used before initialisation or after teardown."""


class ProviderConfigError(NotecapError):
    """A code path needs an LLM provider but none is configured."""


class ProviderError(NotecapError):
    """A vision / LLM call failed or returned something unparseable."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class StoreError(NotecapError):
    """A document-store operation failed."""


class ProcessingError(NotecapError):
    """Top-level failure of a synthesis run, wrapping the underlying cause."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
