"""
Retry logic with exponential backoff for calls to external services.
"""

import logging
import asyncio
import random
from typing import Callable, Type, Tuple, Any

logger = logging.getLogger(__name__)


class RetryExhausted(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


async def retry_with_backoff(
    func: Callable,
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    skip_on: Tuple[Type[Exception], ...] = (),
    **kwargs
) -> Any:
    """
    Await `func(*args, **kwargs)`, retrying on `retry_on` exceptions.

    Exceptions in `skip_on` are re-raised immediately. After the last
    attempt fails, RetryExhausted is raised from the final error.
    """
    name = getattr(func, "__name__", repr(func))

    for attempt in range(max_retries + 1):
        try:
            result = await func(*args, **kwargs)
            if attempt > 0:
                logger.info(f"Retry successful on attempt {attempt + 1}/{max_retries + 1} for {name}")
            return result

        except skip_on:
            raise

        except retry_on as e:
            if attempt == max_retries:
                logger.error(f"All {max_retries + 1} retry attempts exhausted for {name}")
                raise RetryExhausted(
                    f"Failed after {max_retries + 1} attempts: {type(e).__name__}: {e}"
                ) from e

            delay = min(base_delay * (exponential_base ** attempt), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())

            logger.warning(
                f"Retry attempt {attempt + 1}/{max_retries + 1} for {name} "
                f"after {type(e).__name__}: {e}. Retrying in {delay:.2f}s..."
            )
            await asyncio.sleep(delay)

    raise RetryExhausted(f"Failed after {max_retries + 1} attempts")


# Activity logs are polled every minute anyway; keep retries short
ACTIVITY_SIGNAL_RETRY = {
    "base_delay": 0.5,
    "max_delay": 5.0,
    "retry_on": (ConnectionError, TimeoutError, OSError),
}
