import asyncio
import math

import pytest

from crpt_api.services.throttle import AsyncThrottle, ConfigurationError, InterruptedWait


class Boom(Exception):
    pass


def test_async_invalid_capacity_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        AsyncThrottle(capacity=0, cooldown_s=1)


@pytest.mark.parametrize("cooldown_s", [-1, math.nan, math.inf])
def test_async_negative_cooldown_is_rejected(cooldown_s) -> None:
    with pytest.raises(ConfigurationError):
        AsyncThrottle(capacity=1, cooldown_s=cooldown_s)


def test_async_third_caller_waits_for_cooldown() -> None:
    cooldown = 0.2

    async def scenario() -> list[float]:
        loop = asyncio.get_running_loop()
        throttle = AsyncThrottle(capacity=2, cooldown_s=cooldown)
        admitted: list[float] = []

        async def transport(_req):
            admitted.append(loop.time())

        await asyncio.gather(*(throttle.submit(i, transport) for i in range(3)))
        assert throttle.available_permits == 2
        return admitted

    admitted = sorted(asyncio.run(scenario()))
    assert admitted[1] - admitted[0] < cooldown / 2
    assert admitted[2] - admitted[0] >= cooldown * 0.95


def test_async_failing_transport_does_not_leak_permits() -> None:
    async def scenario() -> int:
        throttle = AsyncThrottle(capacity=2, cooldown_s=0)

        async def failing(_req):
            raise Boom()

        results = await asyncio.gather(
            *(throttle.submit(i, failing) for i in range(6)),
            return_exceptions=True,
        )
        assert all(isinstance(r, Boom) for r in results)
        return throttle.available_permits

    assert asyncio.run(scenario()) == 2


def test_async_wait_timeout_raises_interrupted_wait() -> None:
    async def scenario() -> None:
        throttle = AsyncThrottle(capacity=1, cooldown_s=0)

        async with throttle.permit():
            with pytest.raises(InterruptedWait):
                await throttle.submit(None, _echo, timeout=0.05)
            assert throttle.available_permits == 0

        assert throttle.available_permits == 1

    asyncio.run(scenario())


def test_async_cancel_while_waiting_does_not_change_pool() -> None:
    async def scenario() -> None:
        throttle = AsyncThrottle(capacity=1, cooldown_s=0)

        async with throttle.permit():
            waiter = asyncio.create_task(throttle.submit(None, _echo))
            await asyncio.sleep(0.01)
            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            assert throttle.available_permits == 0

        assert throttle.available_permits == 1
        assert await throttle.submit("x", _echo) == "x"

    asyncio.run(scenario())


def test_async_cancel_during_cooldown_releases_permit() -> None:
    async def scenario() -> None:
        throttle = AsyncThrottle(capacity=1, cooldown_s=60)

        task = asyncio.create_task(throttle.submit(None, _echo))
        await asyncio.sleep(0.01)
        assert throttle.available_permits == 0

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert throttle.available_permits == 1

    asyncio.run(scenario())


async def _echo(req):
    return req
