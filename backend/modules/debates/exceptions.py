"""
Debates module exceptions.
"""

from shared.exceptions import (
    ArenaError,
    NotFoundError,
    ValidationError,
)
from modules.generation.exceptions import GenerationError  # noqa: F401  re-exported


class DebateError(ArenaError):
    """Base exception for debate-related errors."""

    pass


class UnknownDebateError(NotFoundError):
    """Raised when a debate is not found."""

    def __init__(self, debate_id: str):
        super().__init__(
            f"Debate not found: {debate_id}",
            code="DEBATE_NOT_FOUND",
            details={"debate_id": debate_id},
        )
        self.debate_id = debate_id


class DebateAlreadyCompletedError(ValidationError):
    """Raised when trying to modify a debate in a terminal state."""

    def __init__(self, debate_id: str, status: str):
        super().__init__(
            f"Debate is already {status}: {debate_id}",
            code="DEBATE_ALREADY_COMPLETED",
            details={"debate_id": debate_id, "status": status},
        )


class PhaseTransitionError(ValidationError):
    """Raised when a status change would move a debate backwards."""

    def __init__(self, debate_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move debate {debate_id} from {current} to {target}",
            code="INVALID_PHASE_TRANSITION",
            details={"debate_id": debate_id, "current": current, "target": target},
        )


class PreconditionError(DebateError):
    """Raised when a phase cannot start because its inputs are missing."""

    def __init__(self, debate_id: str, phase: str, reason: str):
        super().__init__(
            f"Precondition failed for {phase}: {reason}",
            code="PRECONDITION_FAILED",
            details={"debate_id": debate_id, "phase": phase, "reason": reason},
        )
        self.phase = phase


class PhaseTimeoutError(DebateError):
    """Raised when a phase does not finish within its time bound."""

    def __init__(self, debate_id: str, phase: str, timeout_seconds: float):
        super().__init__(
            f"Phase {phase} timed out after {timeout_seconds:g}s",
            code="PHASE_TIMEOUT",
            details={
                "debate_id": debate_id,
                "phase": phase,
                "timeout_seconds": timeout_seconds,
            },
        )
        self.phase = phase

