"""Error taxonomy for Markdown to DOCX conversion.

Only invalid configuration is an error. Content the converter cannot
interpret degrades to raw text, and unreadable assets degrade to "absent".
"""

from __future__ import annotations


class M2D2Error(Exception):
    """Base class for conversion errors surfaced to callers."""


class UnknownStyle(M2D2Error, KeyError):
    """Requested theme name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = list(available or [])
        super().__init__(name)

    def __str__(self) -> str:
        msg = f'Unknown style: "{self.name}".'
        if self.available:
            msg += f" Available: {', '.join(self.available)}"
        return msg


class MissingInput(M2D2Error, ValueError):
    """No markdown content was supplied."""

    def __init__(self, message: str = "Missing or invalid markdown input"):
        super().__init__(message)
