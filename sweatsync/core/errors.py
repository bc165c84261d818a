"""Error types for SweatSync.

Components raise these; the API layer maps each family to an HTTP status.
"""


class SweatSyncError(Exception):
    """Base exception for all domain errors."""


class ValidationFailure(SweatSyncError):
    """Raised when input is malformed. Detected before any mutation."""


class PlanValidationError(ValidationFailure):
    """Raised when an uploaded plan document is structurally invalid."""


class CompletionValidationError(ValidationFailure):
    """Raised when a completed workout submission is incomplete."""


class NotFoundError(SweatSyncError):
    """Raised when a requested record does not exist."""


class AccountNotFoundError(NotFoundError):
    pass


class WorkoutNotFoundError(NotFoundError):
    """Raised when a completed workout id does not exist (or was already deleted)."""

    def __init__(self, workout_id: int) -> None:
        self.workout_id = workout_id
        super().__init__(f"Workout {workout_id} not found or already deleted")


class AuthorizationError(SweatSyncError):
    """Raised when an account targets a record it does not own."""


class WorkoutAccessDeniedError(AuthorizationError):
    def __init__(self, workout_id: int) -> None:
        self.workout_id = workout_id
        super().__init__(f"Access denied to workout {workout_id}")


class ConflictError(SweatSyncError):
    """Raised when a write would violate a uniqueness rule."""


class UsernameTakenError(ConflictError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already exists")


class PersistenceError(SweatSyncError):
    """Raised when the store fails (unreachable, constraint violation).

    Attributes:
        operation: Store operation that failed
        account_id: Account the operation ran for, when known
    """

    def __init__(self, operation: str, account_id: int | None = None, original_error: Exception | None = None) -> None:
        self.operation = operation
        self.account_id = account_id
        self.original_error = original_error
        super().__init__(f"Persistence failure during '{operation}'")


class DefaultPlanUnavailableError(SweatSyncError):
    """Raised when the bundled default plan cannot be read or parsed.

    The default plan is the last resort, so this is fatal for the request.
    """
