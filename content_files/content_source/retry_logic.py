"""Backoff for content sources that answer HTTP 429.

Snapshot downloads are retried after 1s, 2s and 4s when the source rate
limits the client. Any other error is raised on the first attempt.
"""

import logging
import time
from typing import Callable, TypeVar

from .errors import SourceAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3
RATE_LIMIT_STATUS = 429

_RATE_LIMIT_MARKERS = ('429', 'too many requests', 'rate limit')


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Call func, sleeping and retrying while the source rate limits us.

    Raises:
        SourceAccessError: If the source still rate limits after MAX_RETRIES
                           retries

    Example:
        >>> response = retry_on_rate_limit(session.get, url, timeout=30)
    """
    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not is_rate_limited(e):
                raise
            if attempt == MAX_RETRIES:
                logger.error(f"Content source still rate limited after {MAX_RETRIES} retries")
                raise SourceAccessError(
                    f"Content source rate limited the request {MAX_RETRIES + 1} times"
                )

        delay = 2 ** attempt
        attempt += 1
        logger.info(f"Content source rate limited, retry {attempt}/{MAX_RETRIES} in {delay}s")
        time.sleep(delay)


def is_rate_limited(error: Exception) -> bool:
    """Return True if error is an HTTP 429 from the content source.

    The status is read from ``error.status_code``, from
    ``error.response.status_code`` (requests' HTTPError), or failing that
    from the message text.
    """
    response = getattr(error, 'response', None)
    for status in (getattr(error, 'status_code', None), getattr(response, 'status_code', None)):
        if status is not None:
            return status == RATE_LIMIT_STATUS

    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)
