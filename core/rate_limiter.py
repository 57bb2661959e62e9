# core/rate_limiter.py

import time
from collections import defaultdict
from threading import Lock
from typing import Dict, Optional, Tuple

from fastapi import HTTPException, Request

from core.logging_config import logger


# In-memory sliding window, per process.
_rate_limit_store: Dict[str, list] = defaultdict(list)
_lock = Lock()


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record one hit for `identifier` unless the window is already full.

    Returns:
        (allowed, remaining)
    """
    now = time.time()
    window_start = now - window_seconds

    with _lock:
        hits = [ts for ts in _rate_limit_store[identifier] if ts > window_start]

        if len(hits) >= max_requests:
            _rate_limit_store[identifier] = hits
            return False, 0

        hits.append(now)
        _rate_limit_store[identifier] = hits
        return True, max_requests - len(hits)


def client_ip(request: Request) -> str:
    """Originating IP, honouring X-Forwarded-For behind the proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_rate_limit_identifier(request: Request, scope: str, subject: Optional[str] = None) -> str:
    """
    Key for one rate-limited action, e.g. "password-reset:subject:a@b.com".
    Falls back to the client IP when no subject is given.
    """
    if subject:
        return f"{scope}:subject:{subject}"
    return f"{scope}:ip:{client_ip(request)}"


def require_rate_limit(
    request: Request,
    scope: str,
    subject: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Raise 429 when the caller exceeded `max_requests` per `window_seconds`
    for `scope`. Returns the remaining budget otherwise.
    """
    identifier = get_rate_limit_identifier(request, scope, subject)
    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        logger.warning(f"Rate limit hit: {identifier}")
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining


def reset_rate_limits():
    with _lock:
        _rate_limit_store.clear()
