"""Bounded, cancellable entity store retrieval shared by search and suggestions."""
from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .errors import RetrievalFailure, RetrievalTimeout, SearchError
from .models import EntityKind

T = TypeVar("T")


async def guarded(call: Awaitable[list[T]], kind: EntityKind, step: str, timeout: float) -> list[T]:
    """Await one store call, converting store errors into the search taxonomy."""
    try:
        return await call
    except SearchError:
        raise
    except TimeoutError as exc:
        raise RetrievalTimeout(kind, step, timeout) from exc
    except Exception as exc:
        raise RetrievalFailure(kind, step, exc) from exc


async def gather_by_kind(
    calls: dict[EntityKind, Awaitable[list[T]]],
    step: str,
    timeout: float,
) -> dict[EntityKind, list[T]]:
    """
    Run store calls concurrently under one shared timeout.

    The first failure or the timeout cancels the remaining calls and raises
    RetrievalFailure / RetrievalTimeout naming the entity kind involved.
    Cancelling the caller cancels every call still in flight.
    """
    tasks = {
        asyncio.ensure_future(guarded(call, kind, step, timeout)): kind
        for kind, call in calls.items()
    }
    try:
        done, pending = await asyncio.wait(
            tasks, timeout=timeout, return_when=asyncio.FIRST_EXCEPTION
        )
        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()
        for task, kind in tasks.items():
            if task in pending:
                raise RetrievalTimeout(kind, step, timeout)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    return {kind: task.result() for task, kind in tasks.items()}
