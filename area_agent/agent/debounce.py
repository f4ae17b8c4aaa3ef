import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from area_agent.config.settings import settings
from area_agent.models.schemas import ResolutionResult

logger = logging.getLogger(__name__)


class ResolutionDebouncer:
    """
    Coalesces bursts of resolution requests (e.g. one per form edit) into a single call.

    Every `submit` restarts a quiet-period timer and returns a future. When the timer
    fires, only the most recent arguments are resolved, in a worker thread, and every
    future from the burst receives that result. A caller may cancel its future; the
    resolution still runs to completion so its geocode lands in the shared cache.
    """

    def __init__(self, resolve: Callable[..., ResolutionResult], delay_seconds: Optional[float] = None):
        self._resolve = resolve
        self.delay_seconds = settings.debounce_seconds if delay_seconds is None else delay_seconds
        self._timer: Optional[asyncio.TimerHandle] = None
        self._waiters: List[asyncio.Future] = []
        self._pending: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def submit(self, *args: Any, **kwargs: Any) -> "asyncio.Future[ResolutionResult]":
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._waiters.append(future)
        self._pending = (args, kwargs)

        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.delay_seconds, self._fire)
        return future

    def _fire(self):
        self._timer = None
        if self._pending is None:
            return
        args, kwargs = self._pending
        waiters, self._waiters = self._waiters, []
        self._pending = None

        logger.debug(f"Debounce window closed; resolving for {len(waiters)} coalesced request(s).")
        task = asyncio.get_running_loop().create_task(self._run(args, kwargs, waiters))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, args: Tuple[Any, ...], kwargs: Dict[str, Any], waiters: List[asyncio.Future]):
        try:
            result = await asyncio.to_thread(self._resolve, *args, **kwargs)
        except Exception as e:
            logger.error(f"Debounced resolution failed: {e}", exc_info=True)
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_exception(e)
            return

        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(result)

    async def aclose(self):
        """Drops any request still waiting for its quiet period and waits for in-flight work."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.cancel()

        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
