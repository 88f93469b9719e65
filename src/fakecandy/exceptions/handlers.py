"""
Error handling helpers shared by the device and the CLI.

Listeners and responders log a `FakecandyError` by its
`technical_message` and keep serving. The CLI prints `user_message` and
`recovery_hint` through `format_error_for_display`. Pydantic validation
failures are turned into config errors by `wrap_pydantic_error` before
they reach either.
"""

import logging
from functools import wraps
from typing import Callable

from pydantic import ValidationError

from .base import FakecandyError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError

logger = logging.getLogger(__name__)


def _describe(error: BaseException) -> str:
    if isinstance(error, FakecandyError):
        return error.technical_message
    return f"{type(error).__name__}: {error}"


def handle_errors(*, operation_name: str, re_raise: bool = True, log_level: int = logging.ERROR) -> Callable:
    """
    Log any exception escaping the decorated call as "Failed to <operation_name>".

    With `re_raise=False` the exception is dropped and the call returns
    None, for teardown steps that must not stop the ones after them.
    Unexpected (non-fakecandy) exceptions are logged with their traceback.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.log(
                    log_level,
                    f"Failed to {operation_name}: {_describe(e)}",
                    exc_info=not isinstance(e, FakecandyError),
                )
                if re_raise:
                    raise
                return None
        return wrapper
    return decorator


class ErrorContext:
    """
    Log the outcome of a block: DEBUG on success, ERROR on failure.

    The exception is kept in `error`. It propagates unless `re_raise` is
    False.

    Example:
        ```python
        with ErrorContext("start UDP discovery", logger):
            responder.start()
        ```
    """

    def __init__(self, operation: str, logger_instance: logging.Logger | None = None, re_raise: bool = True):
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: BaseException | None = None

    def __enter__(self):
        self.logger.debug(f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            self.logger.debug(f"{self.operation}: done")
            return False

        self.error = exc_val
        self.logger.error(
            f"Failed to {self.operation}: {_describe(exc_val)}",
            exc_info=not isinstance(exc_val, FakecandyError),
        )
        return not self.re_raise


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "configuration"


def wrap_pydantic_error(error: ValidationError, source: str) -> ConfigurationError:
    """
    Turn a failed `AppConfig` validation into a config error.

    Args:
        error: Raised by `model_validate` / `model_validate_json`
        source: Config file path, or "command line"

    Returns:
        ConfigFileInvalidError when the input was not JSON, otherwise a
        ConfigValidationError naming the field (or every failing field)
    """
    errors = error.errors()

    for err in errors:
        if err["type"] == "json_invalid":
            return ConfigFileInvalidError(source, err.get("ctx", {}).get("error", err["msg"]))

    if len(errors) == 1:
        err = errors[0]
        return ConfigValidationError(_field_path(err["loc"]), err.get("input"), err["msg"], source)

    summary = "; ".join(f"{_field_path(err['loc'])}: {err['msg']}" for err in errors)
    return ConfigValidationError("multiple fields", None, f"{len(errors)} errors ({summary})", source)


def format_error_for_display(error: Exception) -> tuple[str, str | None]:
    """(message, hint or None) as printed by the CLI."""
    if isinstance(error, FakecandyError):
        return error.user_message, error.recovery_hint
    return f"{type(error).__name__}: {error}", None
