"""
Retry decorators with exponential backoff using tenacity.

Only transient HTTP failures (connection errors, timeouts, 429 and 5xx) are
retried; a 404 for a missing yearly file is an answer, not a failure.
"""

import logging
from typing import Callable, TypeVar

import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Type variable for generic function decoration
F = TypeVar("F", bound=Callable)


def is_transient_error(exception: BaseException) -> bool:
    """Check whether a request failure is worth retrying."""
    if isinstance(exception, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exception, requests.HTTPError):
        response = exception.response
        return response is not None and (response.status_code == 429 or response.status_code >= 500)
    return False


def create_retry_decorator(
    max_attempts: int = 5,
    min_wait: float = 1.0,
    max_wait: float = 60.0,
    predicate: Callable[[BaseException], bool] = is_transient_error,
) -> Callable[[F], F]:
    """
    Create a retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of retry attempts
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)
        predicate: Decides whether an exception is retried

    Returns:
        Decorator function
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(predicate),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


# NOAA ISD-Lite archive - 5 attempts, polite retry (be nice to gov servers)
isd_retry = create_retry_decorator(
    max_attempts=5,
    min_wait=2.0,
    max_wait=60.0,
)
