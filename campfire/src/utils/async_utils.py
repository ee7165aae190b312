"""
Campfire - Async helpers
=========================
Bounded waiting for remote calls, and off-loop execution of blocking
client libraries (LanceDB's synchronous API).
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import TypeVar

from campfire.src.core.exceptions import RemoteCallTimeout

T = TypeVar("T")


async def run_with_timeout(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """
    Await *awaitable* for at most *timeout* seconds.

    Raises
    ------
    RemoteCallTimeout
        If the deadline passes.  The pending awaitable is cancelled.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise RemoteCallTimeout(f"{operation} timed out after {timeout:.1f}s") from exc


async def run_blocking(func: Callable[..., T], *args: object, timeout: float, operation: str, **kwargs: object) -> T:
    """
    Run a blocking call in the default thread pool, bounded by *timeout*.

    A timeout only stops the wait: the worker thread cannot be cancelled
    and the call keeps running to completion in the background.  Callers
    that must not overlap (table writes) serialise on their own lock.
    """
    call = functools.partial(func, *args, **kwargs)
    return await run_with_timeout(asyncio.to_thread(call), timeout, operation)
