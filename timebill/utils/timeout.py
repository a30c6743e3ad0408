import asyncio
import logging
import functools
from typing import Any, Awaitable, Callable, Optional

from timebill.core.config import settings
from timebill.core.exceptions import ServiceTimeoutException

# Set up module logger
logger = logging.getLogger(__name__)


async def with_timeout(
    coro: Awaitable[Any], timeout: float, error_message: str = "Operation timed out"
) -> Any:
    """
    Execute a coroutine with a timeout.

    Args:
        coro: The coroutine to execute
        timeout: Timeout in seconds
        error_message: Custom error message for timeout

    Returns:
        The result of the coroutine

    Raises:
        ServiceTimeoutException: If the operation times out
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Timeout error: {error_message} (limit: {timeout}s)")
        raise ServiceTimeoutException(error_message)


async def run_blocking(
    func: Callable[..., Any],
    *args: Any,
    timeout: Optional[float] = None,
    error_message: str = "Operation timed out",
    **kwargs: Any,
) -> Any:
    """
    Run a blocking call (e.g. a ``requests`` round trip) in a worker thread,
    bounded by ``timeout`` seconds (defaults to settings.DEFAULT_TIMEOUT).
    """
    if timeout is None:
        timeout = settings.DEFAULT_TIMEOUT
    return await with_timeout(
        asyncio.to_thread(functools.partial(func, *args, **kwargs)),
        timeout=timeout,
        error_message=error_message,
    )
