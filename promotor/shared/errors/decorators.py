"""Decorators guarding service code against technical errors."""

import logging
from collections.abc import Callable
from functools import wraps
from inspect import iscoroutinefunction
from typing import Never, ParamSpec, TypeVar

from .base import AppError
from .mapping import ExceptionMapper

logger = logging.getLogger(__name__)
P = ParamSpec("P")
T = TypeVar("T")


def safe(func: Callable[P, T]) -> Callable[P, T]:
    """Translate technical exceptions into domain errors.

    Usage:
        @safe
        async def import_snapshot(self, data: Snapshot) -> ImportResult:
            ...

    ``AppError`` subclasses pass through unchanged; everything else goes
    through ``ExceptionMapper``. Works for sync and async functions.
    """

    def _handle_exception(e: Exception, func_name: str) -> Never:
        if isinstance(e, AppError):
            raise e
        raise ExceptionMapper.map(e, func_name) from e

    if iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _handle_exception(e, func.__name__)

        return async_wrapper  # type: ignore[return-value]

    @wraps(func)
    def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _handle_exception(e, func.__name__)

    return sync_wrapper  # type: ignore[return-value]

