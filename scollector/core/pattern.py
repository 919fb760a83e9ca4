"""
Extraction pattern - pulls a single field out of free-form command output.

The pattern is compiled and validated once, before any host is polled.
An invalid pattern is a configuration error for the whole run.
"""

import re
from dataclasses import dataclass
from typing import Optional


DEFAULT_PATTERN = r"Serial Number\s*:\s*(\S+)"


class PatternError(ValueError):
    """Raised for an extraction pattern that cannot be used."""


@dataclass(frozen=True)
class ExtractionPattern:
    """
    Compiled regex with exactly one capture group.

    Usage:
        pattern = ExtractionPattern.compile(r"Serial Number\\s*:\\s*(\\S+)")
        pattern.extract("Serial Number : SN12345")   # -> "SN12345"
    """

    regex: re.Pattern

    @classmethod
    def compile(cls, text: str = DEFAULT_PATTERN) -> "ExtractionPattern":
        """
        Compile and validate a pattern string.

        Raises:
            PatternError: Invalid syntax, or not exactly one capture group.
        """
        if not text:
            raise PatternError("Extraction pattern is empty")

        try:
            regex = re.compile(text)
        except re.error as e:
            raise PatternError(f"Invalid extraction pattern {text!r}: {e}") from e

        if regex.groups != 1:
            raise PatternError(
                f"Extraction pattern {text!r} must have exactly one capture group "
                f"(found {regex.groups})"
            )

        return cls(regex=regex)

    @property
    def text(self) -> str:
        return self.regex.pattern

    def extract(self, output: str) -> Optional[str]:
        """Return the capture group of the first match, or None."""
        match = self.regex.search(output or "")
        if not match:
            return None
        # Empty group counts as no match
        return match.group(1) or None
