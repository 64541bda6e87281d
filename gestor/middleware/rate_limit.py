"""요청 제한 미들웨어 - 클라이언트 IP별 슬라이딩 윈도우.

Rate limiting middleware. In-memory sliding window per client IP: at most
`limit` requests within `window_seconds`. Over-budget requests get a 429
RateLimitError envelope with a Retry-After header. The window lives in
process memory, so each worker counts separately.
"""

import math
import time
from collections import deque
from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gestor.logger import get_logger
from gestor.utils.exceptions import RateLimitError

logger = get_logger(__name__)

_SKIP_PATHS = {"/health"}


class SlidingWindowLimiter:
    """식별자별 슬라이딩 윈도우 카운터.

    Sliding window counter keyed by client identifier. Keys with no hit in
    the last window are swept at most once per window, so memory tracks
    recent clients only.

    Args:
        limit: 윈도우당 최대 요청 수 (Requests allowed per window)
        window_seconds: 윈도우 길이 (Window length in seconds)
        clock: 단조 시계 (Monotonic clock; injectable for tests)
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        """추적 중인 식별자 수 (Number of tracked client keys)."""
        return len(self._hits)

    def hit(self, key: str) -> float | None:
        """요청을 기록합니다. 허용되면 None, 거부되면 재시도까지 남은 초.

        Record a request. Returns None when allowed, otherwise the seconds
        until the oldest hit leaves the window.
        """
        now = self._clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        hits = self._hits.setdefault(key, deque())
        # 윈도우 밖의 기록 제거 - Drop hits outside the window
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self.limit:
            return self.window_seconds - (now - hits[0])
        hits.append(now)
        return None

    def _sweep(self, now: float) -> None:
        # 윈도우가 빈 식별자 삭제 - Forget keys whose newest hit left the window
        idle = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in idle:
            del self._hits[key]
        self._last_sweep = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    """클라이언트 IP별 요청 제한 미들웨어 (Per-IP request budget; limit 0 disables)."""

    def __init__(self, app: Any, limit: int, window_seconds: float = 60.0) -> None:
        super().__init__(app)
        self.limiter = SlidingWindowLimiter(limit, window_seconds)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self.limiter.limit <= 0 or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.limiter.hit(client_ip)
        if retry_after is not None:
            logger.warning("rate_limited", client_ip=client_ip, path=request.url.path)
            return JSONResponse(
                status_code=RateLimitError.default_status,
                content={"code": RateLimitError.code, "message": RateLimitError.default_message},
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )
        return await call_next(request)
