"""Exception hierarchy for workout-gamifier.

All of these are recoverable by the caller; none should end the process.
"""


class GamifierError(Exception):
    """Base exception for all workout_gamifier errors."""


class InvalidArgumentError(GamifierError, ValueError):
    """Malformed input such as an empty name or a non-positive cost."""


class NotFoundError(GamifierError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(GamifierError):
    """Operation attempted against a session not in the required state."""

    def __init__(self, session_id: int, status: str, operation: str) -> None:
        super().__init__(
            f"Cannot {operation}: session {session_id} is {status}, not active"
        )
        self.session_id = session_id
        self.status = status
        self.operation = operation


class ConflictActiveSessionError(GamifierError):
    """Another session is already active for the same owner."""

    def __init__(self, owner: str, active_session_id: int | None = None) -> None:
        detail = f" (session {active_session_id})" if active_session_id else ""
        super().__init__(
            f"Cannot start a new session while another session is active for '{owner}'{detail}"
        )
        self.owner = owner
        self.active_session_id = active_session_id


class EmptyPoolError(GamifierError):
    """A pool has no visible workouts to select from."""

    def __init__(self, pool_id: int, difficulty: str | None = None) -> None:
        which = f"visible {difficulty} workouts" if difficulty else "visible workouts"
        super().__init__(f"Workout pool {pool_id} has no {which}")
        self.pool_id = pool_id
        self.difficulty = difficulty


class InsufficientPointsError(GamifierError):
    """Session balance is lower than the requested cost."""

    def __init__(self, balance: int, required: int) -> None:
        super().__init__(
            f"Insufficient points. Current balance: {balance}, Required: {required}"
        )
        self.balance = balance
        self.required = required


class CatalogConflictError(GamifierError):
    """A catalog edit would break a reference held elsewhere."""


class IntegrityViolationError(GamifierError):
    """A data snapshot failed referential or business-rule checks."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        summary = errors[0] if errors else "integrity check failed"
        if len(errors) > 1:
            summary += f" (and {len(errors) - 1} more)"
        super().__init__(summary)
        self.errors = errors
        self.warnings = warnings or []


class StorageFailureError(GamifierError):
    """The storage layer failed to execute or commit a change."""
