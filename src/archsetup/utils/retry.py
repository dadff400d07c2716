# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

import functools
import logging
import time

log = logging.getLogger("archsetup")


class RetryError(RuntimeError):
    pass


def retry(
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (Exception,),
):
    """
    Retry decorator for idempotent network operations (downloads, clones).

    attempts: total number of tries
    delay: seconds to sleep between tries
    retry_on: exception types worth retrying; anything else propagates at once
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            last_exc = None
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    last_exc = exc
                    log.debug("%s attempt %d/%d failed: %s", fn.__name__, attempt, attempts, exc)
                    if attempt < attempts:
                        time.sleep(delay)
            raise RetryError(f"{fn.__name__} failed after {attempts} attempts: {last_exc}") from last_exc
        return wrapper
    return decorator
