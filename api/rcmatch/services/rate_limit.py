import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from ..auth.security import decode_access_token
from ..config import SESSION_COOKIE_NAME


@dataclass
class RateDecision:
    allowed: bool
    retry_after_seconds: int


class SlidingWindowLimiter:
    """Per-process sliding window; good enough for a single API worker."""

    def __init__(self) -> None:
        self._events: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def check(self, key: str, limit: int, window_seconds: int) -> RateDecision:
        now = time.monotonic()
        cutoff = now - window_seconds
        with self._lock:
            dq = self._events[key]
            while dq and dq[0] <= cutoff:
                dq.popleft()
            if len(dq) >= limit:
                return RateDecision(allowed=False, retry_after_seconds=max(1, int(dq[0] + window_seconds - now)))
            dq.append(now)
            return RateDecision(allowed=True, retry_after_seconds=0)

    def reset(self) -> None:
        with self._lock:
            self._events.clear()


limiter = SlidingWindowLimiter()


def _client_host(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _caller_key(request: Request) -> str:
    """Key on the verified token subject; unverifiable credentials fall back to the client host."""
    token = request.cookies.get(SESSION_COOKIE_NAME, "")
    auth = request.headers.get("authorization", "").strip()
    if not token and auth.lower().startswith("bearer "):
        token = auth[7:].strip()
    if token:
        try:
            subject = decode_access_token(token).get("sub")
        except HTTPException:
            subject = None
        if subject:
            return f"user:{subject}"
    return _client_host(request)


def rate_limit_dependency(route_key: str, limit: int, window_seconds: int, *, per_user: bool = True):
    def _dep(request: Request) -> None:
        caller = _caller_key(request) if per_user else _client_host(request)
        decision = limiter.check(f"{route_key}:{caller}", limit=limit, window_seconds=window_seconds)
        if not decision.allowed:
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Retry in {decision.retry_after_seconds}s",
                headers={"Retry-After": str(decision.retry_after_seconds)},
            )

    return Depends(_dep)
