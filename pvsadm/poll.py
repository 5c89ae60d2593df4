"""Bounded polling: re-check a condition on a fixed tick until done, failed, or timed out."""

import asyncio
import inspect
import logging
import math

logger = logging.getLogger(__name__)


class PollTimeoutError(TimeoutError):
    """The deadline elapsed before the condition reported done or failed."""

    def __init__(self, timeout, description="condition"):
        super().__init__(f"Timeout after {timeout}s waiting for {description}")
        self.timeout = timeout
        self.description = description


class LoopClock:
    """Event-loop clock: monotonic loop time plus asyncio.sleep."""

    def time(self):
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds):
        await asyncio.sleep(seconds)


async def poll_until(interval, timeout, check, description="condition", clock=None):
    """Invoke *check* on every tick until it reports done, raises, or the deadline passes.

    Ticks fall on ``start + k * interval`` for k >= 1; there is no check at
    time zero. The poller sleeps until whichever of the next tick or the
    deadline comes first. A tick landing exactly on the deadline is still
    checked. When a slow *check* overruns one or more ticks, the latest of
    them is taken as soon as the check returns and the rest are dropped,
    the way a ticker with a one-slot buffer behaves.

    Args:
        interval: seconds between ticks, must be positive.
        timeout: seconds from the start of the call until the deadline.
        check: callable (sync or async) returning truthy when done.
            Any exception it raises stops polling and propagates unchanged.
        description: what is being waited for, used in the timeout message.
        clock: object with ``time()`` and async ``sleep(seconds)``;
            defaults to the running event loop.

    Returns:
        True once *check* reports done.

    Raises:
        ValueError: if *interval* is not positive.
        PollTimeoutError: if the deadline passes without a terminal result.
    """
    if interval <= 0:
        raise ValueError(f"poll interval must be positive, got {interval}")

    clock = clock or LoopClock()
    start = clock.time()
    deadline = start + timeout
    # Float slack so that e.g. timeout=0.3, interval=0.1 still yields 3 ticks
    last_tick = math.floor(timeout / interval + 1e-9) if timeout > 0 else 0

    tick = 0
    while True:
        elapsed_ticks = math.floor((clock.time() - start) / interval + 1e-9)
        if elapsed_ticks > tick:
            # Tick fired during the previous check: take it now
            tick = elapsed_ticks
        else:
            tick += 1
        if tick > last_tick:
            remaining = deadline - clock.time()
            if remaining > 0:
                await clock.sleep(remaining)
            raise PollTimeoutError(timeout, description)

        delay = start + tick * interval - clock.time()
        if delay > 0:
            await clock.sleep(delay)

        result = check()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True
        logger.debug(f"Poll tick {tick}: {description} not reached yet")
