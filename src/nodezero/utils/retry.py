# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/utils/retry.py
import functools
import time
from typing import Callable


class RetryError(RuntimeError):
    pass


class NotReady(Exception):
    """Raised by a polled function to ask for another attempt."""


def retry(
    *,
    retries: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (NotReady,),
    on_retry: Callable[[int, Exception], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Retry decorator for polling idempotent calls.

    retries: number of attempts
    delay: seconds between attempts
    retry_on: exception types that mean "try again"
    on_retry: callback(attempt, exception)
    sleep: injectable for tests
    """
    if retries < 1:
        raise ValueError("retries must be >= 1")

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            last_exc = None
            for attempt in range(1, retries + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    last_exc = exc
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == retries:
                        break
                    sleep(delay)
            raise RetryError(f"{fn.__name__} failed after {retries} attempts") from last_exc
        return wrapper
    return decorator
