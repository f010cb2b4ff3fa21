"""Errors raised by generation providers."""

from __future__ import annotations


class GenerationError(RuntimeError):
    """Base class for failures of a generation call."""


class TransientProviderError(GenerationError):
    """A failure that may succeed if the call is retried."""


class TerminalProviderError(GenerationError):
    """A failure that retrying will not fix."""


class ProviderNetworkError(TransientProviderError):
    """The transport failed before a response was received."""


class ProviderBusyError(TransientProviderError):
    """The provider answered with a rate-limit or overload status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Gemini API is busy (status {status_code})")
        self.status_code = status_code


class ProviderRemoteError(TerminalProviderError):
    """The provider answered with a non-success status, or an unreadable body."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Gemini API error (status {status_code}): {body}")
        self.status_code = status_code
        self.body = body


class GenerationStoppedError(TerminalProviderError):
    """Generation ended for an abnormal reason without producing text."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Text generation was stopped early by the API. Reason: {reason}")
        self.reason = reason


class EmptyResponseError(TerminalProviderError):
    """The response carried no candidate or no text."""

    def __init__(self) -> None:
        super().__init__("No content found in Gemini response")
