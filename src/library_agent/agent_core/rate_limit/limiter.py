"""Per-model-configuration admission control for completion calls.

Each ``ModelConfig`` that carries a ``RateLimitPolicy`` gets its own limiter
state, keyed by the configuration id, so traffic under one configuration
never waits on another's usage. Three policy kinds are supported:

* ``concurrency``: at most ``limit`` calls in flight at once.
* ``rpm``: at most ``limit`` admissions per sliding window.
* ``tpm``: at most ``limit`` estimated tokens admitted per sliding window.
  A single request larger than the whole budget is admitted once the
  window is empty.

Usage::

    limiter = RateLimiter()
    async with limiter.slot(model_config, estimated_cost=1200):
        stream = transport.stream_completion(...)

``acquire``/``release`` are exposed as well; callers using them directly must
release in a ``finally`` block.
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Deque, Dict, Optional, Sequence, Tuple

from ..config import ModelConfig, RateLimitKind, RateLimitPolicy
from ..logger import get_logger

logger = get_logger(__name__)


def estimate_tokens(messages: Sequence[Any]) -> float:
    """Rough token estimate: a quarter of the serialized request length."""
    return len(json.dumps(list(messages), default=str)) / 4


def _wake(waiter: "asyncio.Future[None]") -> None:
    if not waiter.done():
        waiter.set_result(None)


class _ConfigLimiter:
    """Admission state for a single model configuration."""

    def __init__(self, policy: RateLimitPolicy, clock: Callable[[], float]) -> None:
        self.policy = policy
        self.in_flight = 0
        self._clock = clock
        self._lock = threading.Lock()
        self._window: Deque[Tuple[float, float]] = deque()
        self._waiters: Deque["asyncio.Future[None]"] = deque()

    def _prune(self, now: float) -> None:
        horizon = now - self.policy.window_seconds
        while self._window and self._window[0][0] <= horizon:
            self._window.popleft()

    def _admission_delay(self, cost: float, now: float) -> Optional[float]:
        """Return 0 when admissible now, seconds to wait, or None to wait for a release."""
        kind = self.policy.kind
        limit = self.policy.limit

        if kind is RateLimitKind.CONCURRENCY:
            return 0.0 if self.in_flight < limit else None

        self._prune(now)
        window = self.policy.window_seconds

        if kind is RateLimitKind.REQUESTS_PER_MINUTE:
            if len(self._window) < limit:
                return 0.0
            return max(self._window[0][0] + window - now, 0.0)

        used = sum(c for _, c in self._window)
        if not self._window or used + cost <= limit:
            return 0.0
        freed = 0.0
        for started, c in self._window:
            freed += c
            if used - freed + cost <= limit:
                return max(started + window - now, 0.0)
        return max(self._window[-1][0] + window - now, 0.0)

    def try_admit(self, cost: float) -> Optional[float]:
        with self._lock:
            now = self._clock()
            delay = self._admission_delay(cost, now)
            if delay == 0.0:
                self.in_flight += 1
                if self.policy.kind is RateLimitKind.REQUESTS_PER_MINUTE:
                    self._window.append((now, 1.0))
                elif self.policy.kind is RateLimitKind.TOKENS_PER_MINUTE:
                    self._window.append((now, max(cost, 0.0)))
            return delay

    async def acquire(self, cost: float) -> None:
        while True:
            delay = self.try_admit(cost)
            if delay == 0.0:
                return

            waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            with self._lock:
                self._waiters.append(waiter)
            wait = "until release" if delay is None else f"{delay:.3f}s"
            logger.debug(
                f"Admission deferred ({self.policy.kind.value} limit {self.policy.limit}, "
                f"in flight {self.in_flight}, wait {wait})."
            )
            try:
                # A None delay waits for release().
                await asyncio.wait({waiter}, timeout=delay)
            except asyncio.CancelledError:
                with self._lock:
                    handoff = waiter not in self._waiters
                    if not handoff:
                        self._waiters.remove(waiter)
                if handoff:
                    self._wake_next()
                raise
            finally:
                with self._lock:
                    if waiter in self._waiters:
                        self._waiters.remove(waiter)

    def release(self) -> None:
        with self._lock:
            if self.in_flight > 0:
                self.in_flight -= 1
            else:
                logger.warning("Release without a matching acquire ignored.")
        self._wake_next()

    def _wake_next(self) -> None:
        with self._lock:
            while self._waiters:
                waiter = self._waiters.popleft()
                if not waiter.done():
                    waiter.get_loop().call_soon_threadsafe(_wake, waiter)
                    return


class RateLimiter:
    """Admission control shared by every session that uses the same model configurations."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._limiters: Dict[str, _ConfigLimiter] = {}

    def _get_limiter(self, model_config: ModelConfig) -> Optional[_ConfigLimiter]:
        policy = model_config.rate_limit
        if policy is None:
            return None
        with self._lock:
            limiter = self._limiters.get(model_config.id)
            if limiter is None:
                limiter = _ConfigLimiter(policy, self._clock)
                self._limiters[model_config.id] = limiter
                logger.debug(f"Created limiter for '{model_config.id}': {policy.kind.value} {policy.limit}.")
            elif limiter.policy != policy:
                logger.info(f"Rate limit policy for '{model_config.id}' changed to {policy.kind.value} {policy.limit}.")
                limiter.policy = policy
            return limiter

    async def acquire(self, model_config: ModelConfig, estimated_cost: float = 0.0) -> None:
        """Suspend until the configuration's policy admits one more call.

        Args:
            model_config: Configuration whose policy governs the call.
            estimated_cost: Approximate token count, used by ``tpm`` policies.
        """
        limiter = self._get_limiter(model_config)
        if limiter is None:
            return
        await limiter.acquire(estimated_cost)

    def release(self, model_config_id: str) -> None:
        """Return a slot taken by ``acquire``. Unknown ids are ignored."""
        with self._lock:
            limiter = self._limiters.get(model_config_id)
        if limiter is None:
            return
        limiter.release()

    @asynccontextmanager
    async def slot(self, model_config: ModelConfig, estimated_cost: float = 0.0) -> AsyncIterator[None]:
        """Async context manager pairing ``acquire`` with a guaranteed ``release``."""
        await self.acquire(model_config, estimated_cost)
        try:
            yield
        finally:
            if model_config.rate_limit is not None:
                self.release(model_config.id)

    def in_flight(self, model_config_id: str) -> int:
        with self._lock:
            limiter = self._limiters.get(model_config_id)
        return limiter.in_flight if limiter else 0


_default_lock = threading.Lock()
_default_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter used when a session is not given one."""
    global _default_limiter
    with _default_lock:
        if _default_limiter is None:
            _default_limiter = RateLimiter()
        return _default_limiter
