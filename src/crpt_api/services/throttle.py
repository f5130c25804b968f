from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Awaitable, Callable, Iterator, TypeVar

from crpt_api.core.config import ConfigurationError

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")


class InterruptedWait(Exception):
    """
    Raised when a caller gives up waiting for a permit.

    No permit is held at that point, so nothing has to be released.
    """


def _validate(capacity: int, cooldown_s: float) -> None:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ConfigurationError(f"capacity must be a positive integer, got {capacity!r}")
    if not math.isfinite(cooldown_s) or cooldown_s < 0:
        raise ConfigurationError(f"cooldown must be a finite number >= 0, got {cooldown_s!r}")


class Throttle:
    """
    Fixed pool of permits for blocking (thread-based) callers.

    A permit is taken before the send and kept for `cooldown_s` after the
    transport returns, so at most `capacity` requests are sending or cooling
    down at any moment. Waiters are woken in no particular order (not FIFO).
    """

    def __init__(
            self,
            capacity: int,
            cooldown_s: float,
            *,
            sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        _validate(capacity, cooldown_s)

        self._capacity = capacity
        self._cooldown_s = float(cooldown_s)
        self._sleep = sleep
        self._cond = threading.Condition(threading.Lock())
        self._available = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cooldown_s(self) -> float:
        return self._cooldown_s

    @property
    def available_permits(self) -> int:
        with self._cond:
            return self._available

    def _acquire(self, timeout: float | None) -> None:
        with self._cond:
            if not self._cond.wait_for(lambda: self._available > 0, timeout=timeout):
                logger.warning("Permit wait abandoned after timeout_s=%s", timeout)
                raise InterruptedWait(f"no permit available within {timeout}s")
            self._available -= 1
            logger.debug("Permit acquired available=%d/%d", self._available, self._capacity)

    def _release(self) -> None:
        with self._cond:
            if self._available >= self._capacity:
                raise RuntimeError("permit released more times than acquired")
            self._available += 1
            self._cond.notify()
            logger.debug("Permit released available=%d/%d", self._available, self._capacity)

    @contextmanager
    def permit(self, timeout: float | None = None) -> Iterator[None]:
        """
        Hold one permit for the duration of the block.

        The permit is returned on every exit path, including exceptions raised
        inside the block.
        """
        self._acquire(timeout)
        try:
            yield
        finally:
            self._release()

    def _cool_down(self) -> None:
        if self._cooldown_s > 0:
            logger.debug("Cooling down for %.3fs", self._cooldown_s)
            self._sleep(self._cooldown_s)

    def submit(
            self,
            request: RequestT,
            transport: Callable[[RequestT], ResultT],
            *,
            timeout: float | None = None,
    ) -> ResultT:
        """
        Send `request` through `transport` under a permit.

        Blocks until a permit is free (or raises InterruptedWait once `timeout`
        elapses), calls the transport, then keeps the permit for the cooldown
        whether the transport succeeded or raised. Transport errors propagate
        unchanged and are never retried here.
        """
        with self.permit(timeout=timeout):
            logger.info("Sending request")
            try:
                return transport(request)
            finally:
                self._cool_down()


class AsyncThrottle:
    """
    asyncio counterpart of Throttle.

    Cancelling a task while it waits for a permit leaves the pool untouched;
    cancelling it while sending or cooling down releases its permit.
    """

    def __init__(
            self,
            capacity: int,
            cooldown_s: float,
            *,
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        _validate(capacity, cooldown_s)

        self._capacity = capacity
        self._cooldown_s = float(cooldown_s)
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(capacity)
        self._held = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cooldown_s(self) -> float:
        return self._cooldown_s

    @property
    def available_permits(self) -> int:
        return self._capacity - self._held

    @asynccontextmanager
    async def permit(self, timeout: float | None = None) -> AsyncIterator[None]:
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Permit wait abandoned after timeout_s=%s", timeout)
            raise InterruptedWait(f"no permit available within {timeout}s") from exc

        self._held += 1
        logger.debug("Permit acquired available=%d/%d", self.available_permits, self._capacity)
        try:
            yield
        finally:
            self._held -= 1
            self._semaphore.release()
            logger.debug("Permit released available=%d/%d", self.available_permits, self._capacity)

    async def submit(
            self,
            request: RequestT,
            transport: Callable[[RequestT], Awaitable[ResultT]],
            *,
            timeout: float | None = None,
    ) -> ResultT:
        async with self.permit(timeout=timeout):
            logger.info("Sending request")
            try:
                return await transport(request)
            finally:
                if self._cooldown_s > 0:
                    logger.debug("Cooling down for %.3fs", self._cooldown_s)
                    await self._sleep(self._cooldown_s)
