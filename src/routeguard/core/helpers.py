from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


async def maybe_await(x: Any) -> Any:
    """Await *x* if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(x):
        return await x
    return x


def run_sync(factory: Callable[[], Awaitable[T]]) -> T:
    """Run the coroutine produced by *factory* to completion from sync code.

    Without a running loop in this thread ``asyncio.run`` is used. When a loop is
    already running (sync code called from async code), the coroutine runs on a
    fresh loop in a worker thread and this call blocks until it finishes.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_as_coroutine(factory))

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="routeguard-sync"
    ) as pool:
        return pool.submit(asyncio.run, _as_coroutine(factory)).result()


async def _as_coroutine(factory: Callable[[], Awaitable[T]]) -> T:
    return await factory()
