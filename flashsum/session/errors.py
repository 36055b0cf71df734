from __future__ import annotations

"""Recoverable errors raised by the session engine to command callers."""


class SessionError(Exception):
    """Base class for every error the engine reports back to a caller."""


class InvalidConfig(SessionError):
    pass


class AlreadyRunning(SessionError):
    def __init__(self, message: str = "session already running") -> None:
        super().__init__(message)


class NotFound(SessionError):
    def __init__(self, message: str = "session result not found") -> None:
        super().__init__(message)


class InvalidAnswerFormat(SessionError):
    def __init__(self, message: str = "Enter a single integer answer (e.g. 42 or -17).") -> None:
        super().__init__(message)
