"""Fan-in event bus.

Merges any number of asynchronous producers into one queue drained by a
single consumer loop. This module hides:
- How producers are scheduled (one asyncio task each)
- How the consumer learns that every producer has finished
- The backpressure policy (bounded queue, producers wait when it is full)

Ordering is FIFO per producer only. Nothing is promised between producers.
"""

import asyncio
from collections.abc import AsyncIterable, Callable, Coroutine
from typing import Any

from .models import Event

DEFAULT_MAX_SIZE = 1024

# Wakes a consumer blocked on an empty queue after the last producer ends
_WAKE = object()

DebugCallback = Callable[[str, str, str], None]


class EventBus:
    """Bounded fan-in queue with exactly one consumer.

    Example:
        bus = EventBus()
        bus.add_producer("terminal", terminal.poll_events())
        bus.spawn("history", fetch_history())
        async for event in bus:
            handle(event)
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_MAX_SIZE,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._tasks: set[asyncio.Task] = set()
        self._producers = 0
        self._debug_callback = debug_callback

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the callback receiving (level, component, message) traces."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback is not None:
            self._debug_callback(level, "Bus", message)

    @property
    def producer_count(self) -> int:
        """Number of producers still running."""
        return self._producers

    async def post(self, event: Event) -> None:
        """Post an event, waiting while the queue is full."""
        await self._queue.put(event)

    def post_nowait(self, event: Event) -> None:
        """Post an event from the consumer loop without blocking it.

        If the queue is full the put is handed to a task, otherwise the
        consumer would wait on itself.
        """
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self._debug("warning", "queue full, deferring post")
            self._start("deferred-post", self._queue.put(event))

    def add_producer(self, name: str, source: AsyncIterable[Event]) -> asyncio.Task:
        """Pump every event of an async iterable into the queue."""
        return self._start(name, self._pump(name, source))

    def spawn(self, name: str, coro: Coroutine[Any, Any, Event | None]) -> asyncio.Task:
        """Run a background coroutine and post its result, if any, as an event."""
        return self._start(name, self._run_task(coro))

    async def _pump(self, name: str, source: AsyncIterable[Event]) -> None:
        async for event in source:
            await self._queue.put(event)
        self._debug("debug", f"producer {name} finished")

    async def _run_task(self, coro: Coroutine[Any, Any, Event | None]) -> None:
        result = await coro
        if result is not None:
            await self._queue.put(result)

    def _start(self, name: str, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        self._producers += 1
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._producers -= 1
        if not task.cancelled() and task.exception() is not None:
            self._debug("error", f"producer {task.get_name()} failed: {task.exception()}")
        if self._producers == 0:
            try:
                self._queue.put_nowait(_WAKE)
            except asyncio.QueueFull:
                pass  # consumer is not blocked on an empty queue

    def __aiter__(self) -> "EventBus":
        return self

    async def __anext__(self) -> Event:
        while True:
            if self._producers == 0 and self._queue.empty():
                raise StopAsyncIteration
            event = await self._queue.get()
            if event is _WAKE:
                continue
            return event

    async def close(self) -> None:
        """Cancel every running producer and wait for them to stop."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._debug("debug", f"closed, {len(tasks)} producer(s) cancelled")
