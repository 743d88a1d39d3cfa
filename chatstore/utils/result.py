"""
Result type for explicit error handling in the store.

Every data operation on ``ConversationStore`` returns either ``Success`` carrying
the requested value or ``Failure`` carrying an error message plus a typed
error kind. Callers branch on the kind instead of catching driver exceptions.

Example:
    >>> result = await store.get_conversation(conversation_id)
    >>> if result.is_success():
    ...     conversation = result.value

    >>> result = await store.delete_message(conversation_id, "missing")
    >>> result.to_dict()
    {"success": False, "error": "Message 'missing' not found", "error_type": "NotFoundError", ...}
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass
class Success(Generic[T]):
    """
    A successful operation.

    Attributes:
        value: The result value (may legitimately be None, e.g. a missing
            conversation)
    """

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"success": True, "data": self.value}

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Success({self.value})"


@dataclass
class Failure(Generic[E]):
    """
    A failed operation.

    Attributes:
        error: The error message
        error_type: Error kind (``NotFoundError``, ``ValidationError``, ...)
        context: Identifiers involved in the failure
        recoverable: Whether retrying with different input can succeed
        status_code: HTTP status hint for a request layer built on top
    """

    error: E
    error_type: str = "UnknownError"
    context: Optional[Dict[str, Any]] = None
    recoverable: bool = False
    status_code: int = 500

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def is_not_found(self) -> bool:
        """Check whether the failure means the target row does not exist."""
        return self.error_type == ErrorType.NOT_FOUND_ERROR[0]

    def unwrap(self) -> Any:
        """
        Attempt to get the value.

        Raises:
            RuntimeError: Always, since this is a Failure
        """
        raise RuntimeError(f"Called unwrap on Failure: {self.error}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "success": False,
            "error": str(self.error),
            "error_type": self.error_type,
        }
        if self.context:
            result["context"] = self.context
        if self.recoverable:
            result["recoverable"] = True
        return result

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Failure({self.error_type}: {self.error})"


Result = Union[Success[T], Failure[E]]


class ErrorType:
    """Error kinds with HTTP status codes and recoverability."""

    VALIDATION_ERROR = ("ValidationError", 400, True)
    NOT_FOUND_ERROR = ("NotFoundError", 404, False)
    INTERNAL_ERROR = ("InternalError", 500, False)


def _failure(kind: tuple, message: str, context: Optional[Dict[str, Any]]) -> Failure:
    error_type, status_code, recoverable = kind
    return Failure(
        error=message,
        error_type=error_type,
        context=context,
        recoverable=recoverable,
        status_code=status_code,
    )


def validation_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a validation error result."""
    return _failure(ErrorType.VALIDATION_ERROR, message, context)


def not_found_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a not found error result."""
    return _failure(ErrorType.NOT_FOUND_ERROR, message, context)


def internal_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create an internal error result."""
    return _failure(ErrorType.INTERNAL_ERROR, message, context)
