import anyio
import logging
from typing import Any, Awaitable, Callable
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream


logger = logging.getLogger('payment-service-worker-pool')

Task = tuple[Callable[..., Awaitable[Any]], tuple[Any, ...]]


class TaskPool:
    """Fire-and-forget background work with a fixed number of workers and a bounded queue.

    `submit` never blocks: when the queue is full (or the pool is closed) the task
    is dropped with a warning. Failures inside tasks are logged and swallowed.
    """

    def __init__(self, name: str, workers: int, queue_size: int):
        self.name = name
        self.workers = workers
        self.queue_size = queue_size

        self._send: MemoryObjectSendStream[Task]
        self._receive: MemoryObjectReceiveStream[Task]
        self._send, self._receive = anyio.create_memory_object_stream(max_buffer_size=queue_size)

    def submit(self, func: Callable[..., Awaitable[Any]], *args: Any) -> bool:
        try:
            self._send.send_nowait((func, args))
        except anyio.WouldBlock:
            logger.warning(f'{self.name} task rejected - queue is full')
            return False
        except anyio.ClosedResourceError:
            logger.warning(f'{self.name} task rejected - pool is closed')
            return False

        return True

    async def run(self):
        async with self._receive, anyio.create_task_group() as tg:
            for _ in range(self.workers):
                tg.start_soon(self._work)

            logger.info(f'{self.name} pool is started with {self.workers} workers')

    async def aclose(self):
        # Очередь дорабатывается до конца, новые задачи не принимаются
        await self._send.aclose()

    async def _work(self):
        async for func, args in self._receive:
            try:
                await func(*args)
            except Exception:
                logger.exception(f'{self.name} task {getattr(func, '__name__', func)} failed')
