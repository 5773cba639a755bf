"""
Domain exceptions.

Typed exceptions carrying a message, a stable error code and free-form
context, so callers can branch on ``code`` and surface ``message``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class FoodTrackError(Exception):
    """
    Base exception for all food tracking errors.

    Attributes:
        message: Human readable description
        code: Stable machine readable code
        context: Free-form details (operation, ids, original error)

    Example:
        >>> err = FoodTrackError("boom", code="RUNTIME_ERROR")
        >>> err.to_dict()["code"]
        'RUNTIME_ERROR'
    """

    default_code = "UNKNOWN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = dict(context or {})

    def to_dict(self) -> dict[str, Any]:
        """Serializable view for the presentation layer."""
        return {"message": self.message, "code": self.code, "context": self.context}


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(FoodTrackError):
    """
    Candidate meal, settings or percentage set failed a structural check.

    Raised when:
    - Meal record misses id, timestamp, ingredients or nutrition
    - Ingredient percentages do not sum to 100 (within epsilon)
    - Settings fields have the wrong type

    Must be handled by the caller, never persisted.

    Example:
        >>> raise ValidationError("Ingredient percentages must add up to 100%")
    """

    default_code = "VALIDATION_ERROR"


class UnknownFoodError(ValidationError):
    """
    Ingredient name is missing from the loaded reference table.

    Example:
        >>> raise UnknownFoodError("No reference data for 'durian'")
    """

    default_code = "UNKNOWN_FOOD"


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ReferenceDataUnavailable(FoodTrackError):
    """
    Nutrition reference source unreachable or malformed.

    Raised by reference sources; the reference store always recovers
    by installing the embedded fallback table.
    """

    default_code = "REFERENCE_DATA_UNAVAILABLE"


class ClassificationError(FoodTrackError):
    """Base class for image classification failures."""

    default_code = "CLASSIFICATION_ERROR"


class ClassificationTimeout(ClassificationError):
    """
    Image classification did not finish in time.

    The underlying classification keeps running; its result is discarded.

    Example:
        >>> raise ClassificationTimeout("Image processing timed out")
    """

    default_code = "CLASSIFICATION_TIMEOUT"


class ClassificationFailure(ClassificationError):
    """Image classifier raised or returned an unusable result."""

    default_code = "CLASSIFICATION_FAILURE"


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class StorageUnavailable(FoodTrackError):
    """
    Persistent store failed to open or to execute an operation.

    Load operations degrade to empty/default results; explicit saves
    propagate this error to their caller.

    Example:
        >>> raise StorageUnavailable(
        ...     "Database not available", context={"operation": "save_meal"}
        ... )
    """

    default_code = "STORAGE_UNAVAILABLE"


# ═══════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════


def handle_error(error: BaseException, context: Optional[str] = None) -> FoodTrackError:
    """
    Normalize any exception into the FoodTrackError taxonomy.

    Args:
        error: Exception caught by the caller
        context: Name of the operation that failed

    Returns:
        The same error if already typed, otherwise a wrapping FoodTrackError
    """
    logger.error("Error in operation", operation=context or "unknown", error=str(error))

    if isinstance(error, FoodTrackError):
        return error

    if isinstance(error, Exception):
        return FoodTrackError(
            str(error),
            code="RUNTIME_ERROR",
            context={"original_error": type(error).__name__, "operation": context},
        )

    return FoodTrackError(
        "An unexpected error occurred",
        code="UNKNOWN_ERROR",
        context={"operation": context},
    )


async def safe_async_call(
    fn: Callable[[], Awaitable[T]],
    fallback: T,
    context: Optional[str] = None,
) -> T:
    """
    Await ``fn()`` and return ``fallback`` if it raises.

    Args:
        fn: Zero-argument coroutine factory
        fallback: Value returned on failure
        context: Operation name for logging

    Returns:
        Result of ``fn()`` or ``fallback``
    """
    try:
        return await fn()
    except Exception as e:
        handle_error(e, context)
        return fallback
