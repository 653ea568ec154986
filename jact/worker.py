"""Pooled background execution for network lookups.

Each submitted operation is independent: nothing is de-duplicated, cancelled
or ordered across submissions. Callers wait on the returned futures and render
whatever each one produces.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="jact-worker")


def submit(operation: Callable[..., T], *args: Any) -> "Future[T]":
    return _executor.submit(operation, *args)
