"""Fan-out/fan-in helper where one failing task never cancels its siblings."""

import asyncio
from typing import Any, Awaitable, Mapping


async def settle_all(tasks: Mapping[str, Awaitable[Any]]) -> dict[str, Any]:
    """
    Run named awaitables concurrently and wait for every one of them.

    Returns a dict with the same keys; each value is either the task's
    result or the Exception it raised. Cancellation still propagates.
    """
    names = list(tasks)
    results = await asyncio.gather(*(tasks[name] for name in names), return_exceptions=True)
    settled = {}
    for name, result in zip(names, results):
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        settled[name] = result
    return settled
