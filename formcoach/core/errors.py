"""Error taxonomy shared by the scoring and session layers."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid static input: stride, exercise definition, plan or landmark values."""


class InvalidTransition(RuntimeError):
    """An event was sent in a state that does not accept it.

    Only raised by machines built with ``strict=True``; otherwise the event is
    logged and ignored.
    """

    def __init__(self, event: str, status: str) -> None:
        super().__init__(f"{event} not allowed while {status}")
        self.event = event
        self.status = status
