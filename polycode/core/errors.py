from __future__ import annotations


class PolycodeError(Exception):
    """Base exception for all engine errors."""


class InvalidInput(PolycodeError):
    """Raised when the submitted source is empty or not text."""

    def __init__(self, reason: str = "Input code is empty"):
        self.reason = reason
        super().__init__(reason)


class UnsupportedLanguage(PolycodeError):
    """Raised when a language tag is outside the supported set."""

    def __init__(self, tag: object, supported: list[str]):
        self.tag = tag
        self.supported = supported
        super().__init__(
            f"Unsupported language: {tag!r}. Supported languages: {', '.join(supported)}"
        )
