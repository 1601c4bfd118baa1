"""
Error taxonomy for layout-preserving translation jobs.

Every phase of a job is atomic: any of these errors aborts the whole job and
no partially translated document is returned. Each error records the phase it
came from so callers can report a precise message.
"""

from __future__ import annotations

from typing import Optional


class LayoutransError(Exception):
    """Base class for all job failures."""

    phase: str = "job"

    def __init__(self, message: str, phase: Optional[str] = None):
        super().__init__(message)
        if phase is not None:
            self.phase = phase

    def __str__(self) -> str:
        return f"[{self.phase}] {super().__str__()}"


class DocumentParseError(LayoutransError):
    """Input bytes are not a well-formed document or a page failed to decode."""

    phase = "extract"


class TranslationServiceError(LayoutransError):
    """The external translation capability failed (network, auth, quota)."""

    phase = "translate"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AlignmentError(LayoutransError):
    """Translated lines do not correspond 1:1 to the source lines of a batch."""

    phase = "translate"

    def __init__(self, batch_index: int, expected: int, actual: int):
        super().__init__(
            f"batch {batch_index}: expected {expected} translated lines, got {actual}"
        )
        self.batch_index = batch_index
        self.expected = expected
        self.actual = actual


class DocumentRebuildError(LayoutransError):
    """The output document could not be composed or encoded."""

    phase = "compose"


class JobCancelledError(LayoutransError):
    """The job was cancelled at a phase boundary."""
