"""
API utilities for the content hub migration tool
"""

import functools
import logging
import time
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from content_migrator.constants import HTTP_RATE_LIMIT, HTTP_SERVER_ERROR_MIN
from content_migrator.exceptions import APIError
from content_migrator.utils.logging import log_with_context

T = TypeVar("T")

MAX_RETRY_DELAY = 60
BACKOFF_FACTOR = 2.0

# Failures a remote hub call may raise: HTTP errors and transport errors
REMOTE_ERRORS = (APIError, requests.RequestException)


def is_retryable(error: Exception) -> bool:
    """Return True for transient failures: rate limits, server errors, network errors."""
    if isinstance(error, APIError):
        status = error.status_code
        return status is not None and (
            status == HTTP_RATE_LIMIT or status >= HTTP_SERVER_ERROR_MIN
        )
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


def with_retry(
    retry_config: Optional[Dict[str, Any]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator adding exponential-backoff retries to a blocking API call.

    Client errors (4xx other than 429) are raised immediately; transient
    errors are retried up to ``max_retries`` times.
    """
    config = retry_config or {}

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            max_retries = config.get("max_retries", 3)
            delay = config.get("retry_delay", 1)
            log_kwargs = {"component": "http"}

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (APIError, requests.RequestException) as e:
                    if not is_retryable(e):
                        raise

                    log_with_context(
                        logging.WARNING, f"Transient API failure: {e}", **log_kwargs
                    )
                    if attempt >= max_retries:
                        log_with_context(
                            logging.ERROR,
                            f"Max retries reached. Last error: {e}",
                            **log_kwargs,
                        )
                        raise

                    sleep_time = min(delay * (BACKOFF_FACTOR**attempt), MAX_RETRY_DELAY)
                    log_with_context(
                        logging.INFO,
                        f"Retrying in {sleep_time:.1f} seconds...",
                        **log_kwargs,
                    )
                    time.sleep(sleep_time)

            raise RuntimeError("Exited retry loop unexpectedly.")

        return wrapper

    return decorator
