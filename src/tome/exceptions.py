"""
Custom exception classes for Tome.

Every error carries an exit code so the CLI can terminate with a status
that identifies the failure class.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional


class TomeError(Exception):
    """
    Base exception class for all Tome-specific errors.
    """

    def __init__(self, message: str, exit_code: int = 1):
        """
        Initialize the exception.

        Args:
            message: Error message.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(TomeError):
    """
    Exception raised for configuration-related errors.
    """

    def __init__(
        self, message: str, config_file: Optional[str] = None, exit_code: int = 2
    ):
        self.config_file = config_file
        if config_file:
            message = f"{message} (config file: {config_file})"
        super().__init__(message, exit_code)


class ValidationError(TomeError):
    """
    Exception raised when input content, a URL or an import file is rejected.
    """

    def __init__(self, message: str, field: Optional[str] = None, exit_code: int = 3):
        """
        Initialize the exception.

        Args:
            message: Error message.
            field: Name of the offending input, if any.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.field = field
        super().__init__(message, exit_code)


class FormatError(ValidationError):
    """
    Exception raised when a snapshot file does not have the expected shape.
    """

    def __init__(self, message: str, file_path: Optional[str] = None):
        self.file_path = file_path
        if file_path:
            message = f"{message} (file: {file_path})"
        super().__init__(message, field="documents")


class NotFoundError(TomeError):
    """
    Exception raised when a document id does not exist.
    """

    def __init__(self, document_id: str, exit_code: int = 4):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}", exit_code)


class StorageError(TomeError):
    """
    Exception raised for file system failures on documents, copies or snapshots.
    """

    def __init__(
        self, message: str, file_path: Optional[str] = None, exit_code: int = 5
    ):
        self.file_path = file_path
        if file_path:
            message = f"{message} (file: {file_path})"
        super().__init__(message, exit_code)


class BackendError(TomeError):
    """
    Exception raised for failures of the embedding or generative backend.
    """

    def __init__(self, message: str, backend: Optional[str] = None, exit_code: int = 6):
        self.backend = backend
        if backend:
            message = f"{message} (backend: {backend})"
        super().__init__(message, exit_code)


class QueryError(BackendError):
    """
    Exception raised when the delegated retrieval and synthesis call fails.
    """


class IndexUnavailableError(TomeError):
    """
    Exception raised when the semantic index cannot serve queries.
    """

    def __init__(self, message: str = "Semantic index unavailable", exit_code: int = 7):
        super().__init__(message, exit_code)


class RebuildErrorType(Enum):
    """Types of rebuild errors."""

    INITIALIZATION = auto()  # Building the first index failed
    INSERT = auto()  # Incremental insert failed and the fallback rebuild failed
    VECTOR_STORE = auto()  # Collection could not be dropped or recreated
    EMBEDDING = auto()  # Embedding backend failed while indexing
    UNKNOWN = auto()


@dataclass(eq=False)
class RebuildError(TomeError):
    """Fatal failure while (re)building the semantic index.

    Attributes:
        error_type: Type of rebuild error
        message: Error message
        context: Additional context about the error
        is_recoverable: Whether the error can be recovered from
        recovery_hint: Hint for recovery if applicable
    """

    error_type: RebuildErrorType
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    is_recoverable: bool = False
    recovery_hint: str | None = None
    exit_code: int = 8

    def __str__(self) -> str:
        """Get string representation of the error.

        Returns:
            Formatted error message with context
        """
        error_str = f"[{self.error_type.name}] {self.message}"
        if self.context:
            error_str += f"\nContext: {self.context}"
        if self.is_recoverable and self.recovery_hint:
            error_str += f"\nRecovery hint: {self.recovery_hint}"
        return error_str


def get_recovery_strategy(error: RebuildError) -> str | None:
    """Get recovery strategy for a rebuild error.

    Args:
        error: RebuildError to get strategy for

    Returns:
        Recovery strategy if available, None otherwise
    """
    if not error.is_recoverable:
        return None

    if error.recovery_hint:
        return error.recovery_hint

    strategies = {
        RebuildErrorType.INITIALIZATION: "Verify the embedding model configuration and run 'tome init'",
        RebuildErrorType.INSERT: "Run 'tome clean --force' to rebuild the index from the stored documents",
        RebuildErrorType.VECTOR_STORE: "Check the vector store directory and run 'tome clean --force'",
        RebuildErrorType.EMBEDDING: "Check that the embedding model can be loaded and retry",
    }
    return strategies.get(error.error_type)
