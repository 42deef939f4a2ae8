"""Exceptions raised by the detective engine."""


class DetectiveError(Exception):
    """Base class for detective errors."""


class ProviderError(DetectiveError):
    """A completion call to the language model failed at the transport level."""

    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider} request failed: {detail}")
        self.provider = provider
        self.detail = detail


class SessionStateError(DetectiveError, ValueError):
    """A game session transition was requested from the wrong phase."""
