"""
Concurrent fan-out of blocking provider calls.

Adapters are plain `requests` clients. Aggregators run each call in the
default executor, bound it with a timeout, and gather the outcomes so one
slow or failing provider never blocks or aborts the others.
"""

import asyncio
import functools
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ProviderTimeoutError(Exception):
    """A provider call did not finish within its time budget."""
    pass


@dataclass
class CallOutcome(Generic[T]):
    """Result of one fanned-out call: either a value or an error message."""
    value: Optional[T] = None
    error: Optional[str] = None
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def describe_error(exc: BaseException) -> str:
    """Human-readable message for an exception ('Unknown error' if it has none)."""
    return str(exc) or exc.__class__.__name__ or "Unknown error"


async def run_blocking(func: Callable[..., T], *args: Any, timeout: float, **kwargs: Any) -> T:
    """
    Run a blocking callable in the default executor with a timeout.

    Raises:
        ProviderTimeoutError: If the call exceeds `timeout` seconds
        Exception: Whatever the callable raises
    """
    loop = asyncio.get_running_loop()
    call = functools.partial(func, *args, **kwargs)
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, call), timeout=timeout)
    except asyncio.TimeoutError as e:
        name = getattr(func, "__qualname__", repr(func))
        raise ProviderTimeoutError(f"{name} timed out after {timeout:g}s") from e


async def capture(
    func: Callable[..., T],
    *args: Any,
    timeout: float,
    **kwargs: Any
) -> CallOutcome[T]:
    """Run `func` like run_blocking but never raise; errors become CallOutcome.error."""
    start = time.perf_counter()
    try:
        value = await run_blocking(func, *args, timeout=timeout, **kwargs)
    except Exception as e:
        return CallOutcome(error=describe_error(e), latency_ms=(time.perf_counter() - start) * 1000)
    return CallOutcome(value=value, latency_ms=(time.perf_counter() - start) * 1000)


async def gather_outcomes(calls: List[Awaitable[CallOutcome]]) -> List[CallOutcome]:
    """Await all captured calls concurrently; order matches `calls`."""
    return list(await asyncio.gather(*calls))
