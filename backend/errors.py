"""Exception types raised by the workout engine and its stores."""


class EngineError(Exception):
    """Base class for all engine errors."""


class NotFound(EngineError, KeyError):
    """An unknown routine or exercise id was supplied."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep the plain text for log output
        return Exception.__str__(self)


class InvalidTransition(EngineError):
    """The requested command does not apply to the current state."""


class PersistenceFailure(EngineError):
    """Serialising or writing engine state failed."""
