# src/distributed_cache/application/services/background_tasks.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Supervised fire-and-forget tasks.

Synopsis:
    Work the caller must not wait for (populating a missing key, revalidating
    a stale one) runs as asyncio tasks owned by a supervisor. The supervisor:

        * Holds a strong reference to every task until it finishes, so the
          event loop cannot garbage-collect it mid-flight.
        * Reports every failure to an error sink; nothing is raised back to
          the code that spawned the task.
        * Lets tests and shutdown hooks ``drain()`` outstanding work and
          inspect ``pending`` to detect leaked tasks.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from distributed_cache.application.interfaces.cache_callbacks import ErrorSink

__all__ = ["BackgroundTaskSupervisor", "log_background_error"]

logger = logging.getLogger(__name__)


def log_background_error(exc: BaseException, task_name: str) -> None:
    """Default error sink: log the failure with its traceback."""
    logger.error(
        "Background cache task failed",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"task_name": task_name},
    )


class BackgroundTaskSupervisor:
    """Owns detached tasks and routes their failures to an error sink."""

    def __init__(self, *, error_sink: ErrorSink | None = None) -> None:
        self._error_sink: ErrorSink = error_sink or log_background_error
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule ``coro`` on the running loop without awaiting it.

        Args:
            coro: Coroutine to run to completion.
            name: Task name, passed to the error sink on failure.

        Returns:
            The scheduled task.
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        try:
            self._error_sink(exc, task.get_name())
        except Exception:
            logger.exception("Error sink raised while reporting %s", task.get_name())

    async def drain(self) -> None:
        """Wait until every task, including ones spawned meanwhile, has finished."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)
