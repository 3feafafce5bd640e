"""Error types and graceful-degradation helpers for the pipeline.

Fatal failures are raised as PipelineError subclasses. Each carries a generic,
user-facing ``message`` plus a machine-readable ``details`` mapping so callers
can render ``{"error": ..., "details": ...}`` without inspecting tracebacks.

Optional operations that should degrade instead of failing (parse attempts,
image compression) go through safe_execute_sync / safe_execute_async.
"""

from typing import Any, Optional

from pantry_ai.utils.logger import logger


class PipelineError(ValueError):
    """Base class for fatal pipeline failures surfaced to callers."""

    message = "AI request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a response body."""
        return {"error": self.message, "details": self.details}


class ExtractionError(PipelineError):
    """No usable structured payload could be recovered for a fatal intent."""

    message = "Failed to parse AI response"


class RecipeValidationError(PipelineError):
    """A single generated recipe lacks a title, ingredients or instructions."""

    message = "Generated recipe has invalid format"


class BatchGenerationError(PipelineError):
    """Every variant of a multi-recipe request failed or was invalid."""

    message = "Failed to generate valid recipes"


class ImageValidationError(PipelineError):
    """Uploaded image was rejected before reaching the model."""

    message = "Invalid image"


class InvalidTransitionError(PipelineError):
    """A suggestion flow event is not allowed from the current state."""

    message = "Invalid suggestion flow transition"


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    """Log error with appropriate level. Helper to reduce duplication.

    Args:
        operation_name: Description for logging
        exception: Exception that occurred
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
    """
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(
    coro,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
    reraise: bool = False,
):
    """Safely execute async operation with consistent error logging.

    Args:
        coro: Awaitable coroutine to execute.
        operation_name: Description for logging (e.g., "Quick defaults model call").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None (graceful degradation).
        reraise: If True, re-raise exception after logging (for critical ops). Default: False.

    Returns:
        Result of coroutine if successful, default_return on exception when reraise=False.

    Raises:
        Exception: Original exception if reraise=True.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        if reraise:
            raise
        return default_return


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
    reraise: bool = False,
):
    """Safely execute sync operation with consistent error logging.

    Synchronous version of safe_execute_async. Same behavior and patterns.

    Args:
        func: Callable to execute (no args).
        operation_name: Description for logging.
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None (graceful degradation).
        reraise: If True, re-raise exception after logging (for critical ops). Default: False.

    Returns:
        Result of func if successful, default_return on exception when reraise=False.

    Raises:
        Exception: Original exception if reraise=True.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        if reraise:
            raise
        return default_return
