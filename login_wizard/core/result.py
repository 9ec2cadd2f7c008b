"""Result pattern for asynchronous completion callbacks.

Callbacks receive either a ``Success`` carrying the value or a ``Failure``
carrying the exception that ended the operation.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Represents a successful result."""

    value: T

    def is_success(self) -> bool:
        """Check if result is successful."""
        return True

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value or a default."""
        return self.value

    def __repr__(self) -> str:
        """String representation."""
        return f"Success({self.value!r})"


@dataclass(frozen=True)
class Failure:
    """Represents a failed result."""

    exception: BaseException

    @property
    def error(self) -> str:
        """Error message of the wrapped exception."""
        return str(self.exception)

    def is_success(self) -> bool:
        """Check if result is successful."""
        return False

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return True

    def unwrap(self) -> Any:
        """
        Re-raise the wrapped exception.

        Raises:
            BaseException: The exception that ended the operation
        """
        raise self.exception

    def unwrap_or(self, default: T) -> T:
        """
        Get the default value (success value is not available).

        Args:
            default: Default value to return

        Returns:
            The default value
        """
        return default

    def __repr__(self) -> str:
        """String representation."""
        return f"Failure({type(self.exception).__name__}: {self.error!r})"


# Type alias for Result
Result = Union[Success[T], Failure]

# Completion callback signature used by the wizard surface
ResultCallback = Callable[[Result[Any]], None]


def ok(value: T) -> Success[T]:
    """
    Create a successful result.

    Args:
        value: Success value

    Returns:
        Success result
    """
    return Success(value)


def err(exception: BaseException) -> Failure:
    """
    Create a failed result.

    Args:
        exception: Exception that ended the operation

    Returns:
        Failure result
    """
    return Failure(exception)
