"""Custom exception hierarchy for horizon-fs.

Every failure raised by the store falls into one of four classes:
validation (bad path, missing content on a file), not-found, conflict
(unique constraint) and database I/O. Callers map ``error_code`` to their
own user-facing responses.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Validation errors
    INVALID_PATH = "INVALID_PATH"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Lookup errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"

    # Conflict errors
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


class HorizonError(Exception):
    """
    Base exception for all horizon-fs errors.

    Carries a human-readable message, a machine-readable error code and
    optional details for logging or response bodies.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for structured responses.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class PathError(HorizonError):
    """Path string is malformed or uses an unknown root type."""

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path} if path is not None else {}
        super().__init__(message, ErrorCode.INVALID_PATH, details=details)


class ValidationError(HorizonError):
    """Validation failed for caller input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details=details)


class FolderNotFoundError(HorizonError):
    """Folder not found in database."""

    def __init__(self, folder_id):
        super().__init__(
            f"Folder not found with id: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            details={"folder_id": folder_id}
        )


class FileEntryNotFoundError(HorizonError):
    """File (a folder row carrying content) not found in database."""

    def __init__(self, file_id):
        super().__init__(
            f"File not found with id: {file_id}",
            ErrorCode.FILE_NOT_FOUND,
            details={"file_id": file_id}
        )


class AlreadyExistsError(HorizonError):
    """A unique constraint rejected the write (e.g. duplicate path)."""

    def __init__(self, message: str = "Entry already exists", original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, ErrorCode.ALREADY_EXISTS, details=details)


class DatabaseError(HorizonError):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            details=details
        )
