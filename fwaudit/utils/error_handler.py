"""Centralized error handling for fwaudit commands and operations."""

import functools
from collections.abc import Awaitable, Callable
from typing import Any

import click

from fwaudit.utils.logging import logger


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that logs unexpected command failures and surfaces them via click."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except Exception as e:
            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=str(e),
            )
            raise click.ClickException(f"{type(e).__name__}: {e}") from e

    return wrapper


def error_envelope(message: str, **extra: Any) -> dict[str, Any]:
    """Build an error envelope."""
    return {"status": "error", "message": message, **extra}


def envelope_errors(action: str):
    """Contain any exception raised by an operation coroutine in an error envelope.

    The wrapped coroutine never raises; callers always receive a dict with a
    ``status`` key.
    """

    def decorator(func: Callable[..., Awaitable[dict[str, Any]]]):
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.opt(exception=True).error("Error {action}: {err}", action=action, err=str(e))
                return error_envelope(f"Error {action}: {e}")

        return wrapper

    return decorator
