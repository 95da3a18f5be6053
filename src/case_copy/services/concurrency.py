"""Run requests concurrently and stop all of them on the first failure."""

import asyncio
from typing import Any, Coroutine, List


async def gather_or_cancel(*coros: Coroutine) -> List[Any]:
    """
    Await the coroutines concurrently and return their results in order.

    The first failure cancels the tasks still running and is raised
    unwrapped, so callers can catch it as a CaseCopyError.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [task.result() for task in tasks]
