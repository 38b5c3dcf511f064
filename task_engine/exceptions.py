"""Custom exceptions for the task engine."""


class TaskEngineError(Exception):
    """Base exception for all task engine errors."""
    
    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class InvalidArgumentError(TaskEngineError):
    """Exception raised when a required argument is missing or invalid."""
    pass


class ItemNotFoundError(TaskEngineError):
    """Exception raised when a work item is absent from the snapshot."""
    
    def __init__(self, number: int, error_code: str | None = "ITEM_NOT_FOUND") -> None:
        super().__init__(f"Work item #{number} not found in snapshot", error_code)
        self.number = number


class SnapshotError(TaskEngineError):
    """Exception raised when snapshot input is malformed."""
    pass


class ConfigurationError(TaskEngineError):
    """Exception raised when configuration is invalid."""
    pass


class DecompositionError(TaskEngineError):
    """Exception raised for errors in task decomposition."""
    pass


class DependencyError(DecompositionError):
    """Exception raised when a subtask dependency graph is malformed."""
    pass


class DependencyCycleError(DependencyError):
    """Exception raised when a subtask dependency graph contains a cycle."""
    
    def __init__(self, cycle_members: list[str]) -> None:
        super().__init__(
            f"Circular dependency detected between subtasks: {', '.join(cycle_members)}",
            error_code="CIRCULAR_DEPENDENCY",
        )
        self.cycle_members = cycle_members


class PublishError(TaskEngineError):
    """Exception raised when subtasks cannot be published to the tracker.

    ``created`` holds references to the items that were created before
    the failure, so a caller can resume without duplicating them.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
        created: list | None = None,
    ) -> None:
        super().__init__(message, error_code, details)
        self.created = list(created or [])
