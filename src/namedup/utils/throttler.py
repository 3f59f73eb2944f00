import asyncio
from asyncio import TaskGroup, Semaphore


class Throttler:
    """Limits how many tasks scheduled into a TaskGroup run at the same time.

    schedule() waits for a free permit before creating the task, so a producer looping
    over a large tree is held back instead of creating one pending task per file.
    """

    def __init__(self, task_group: TaskGroup, concurrency: int):
        """
        Args:
            task_group: The TaskGroup to which tasks will be added
            concurrency: Maximum number of tasks that can run concurrently
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive: {concurrency}")

        self._task_group = task_group
        self._semaphore = Semaphore(concurrency)

    async def schedule(self, coro, name=None) -> asyncio.Task:
        """Start coro as a task once a permit is available.

        The permit is returned when the task finishes, whether it succeeds, fails or is
        cancelled.
        """
        try:
            await self._semaphore.acquire()
        except BaseException:
            coro.close()
            raise

        try:
            task = self._task_group.create_task(coro, name=name)
        except BaseException:
            self._semaphore.release()
            coro.close()
            raise

        task.add_done_callback(lambda _: self._semaphore.release())
        return task
