"""
Error taxonomy for the HCC classifier.

Parse failures are fatal: a malformed label, crosswalk, or hierarchy
artifact aborts the run. Diagnosis codes missing from the crosswalk are
not errors and never raise.
"""

from typing import Optional


class HCCError(Exception):
    """Base class for all classifier errors."""


class ParseError(HCCError, ValueError):
    """
    A legacy text artifact could not be parsed.

    Attributes:
        artifact: Name of the artifact being parsed (file name or label)
        line_number: 1-based physical line number, when known
        line: Offending line or token content, when known
    """

    def __init__(
        self,
        message: str,
        artifact: str = "<text>",
        line_number: Optional[int] = None,
        line: Optional[str] = None
    ):
        self.artifact = artifact
        self.line_number = line_number
        self.line = line

        location = artifact
        if line_number is not None:
            location = f"{artifact}:{line_number}"
        detail = f"{location}: {message}"
        if line is not None:
            detail = f"{detail} ({line!r})"
        super().__init__(detail)


class SchemaMismatch(HCCError, ValueError):
    """A diagnosis extract does not have the expected columns or values."""


class ConfigError(HCCError):
    """A required artifact path is missing or unreadable."""
