import asyncio
import functools
from typing import TypeVar, Any
from collections.abc import Callable

import asyncpg

from ..errors import BackendError


__all__ = ["handle_database_error"]

F = TypeVar("F", bound=Callable[..., Any])

DATABASE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def handle_database_error(method: F) -> F:
    """Wrap database-interacting storage methods to translate driver errors.

    Args:
        method (Callable[..., Any]):
            Async storage method performing database operations which may raise
            asyncpg, socket or timeout errors.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises BackendError instead. Errors that are
            already part of the shortener taxonomy pass through untouched.

    Example:
        >>> @handle_database_error
        ... async def ping(self):
        ...     async with self._get_connection() as conn:
        ...         await conn.fetchval("SELECT 1")
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except DATABASE_ERRORS as e:
            raise BackendError(
                f"Database error in {method.__name__} against {self.host}:{self.port}/{self.database}: {e}"
            ) from e

    return wrapper
