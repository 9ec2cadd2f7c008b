"""Bridge between coroutines and callback style completion with cancellation handles."""

import asyncio
import concurrent.futures
import threading
import uuid
from typing import Any, Coroutine, Optional, Protocol, Union

from loguru import logger

from ...core.logger import operation_id_ctx
from ...core.result import Result, ResultCallback, err, ok

AnyFuture = Union["asyncio.Future[Any]", "concurrent.futures.Future[Any]"]


class Cancelable(Protocol):
    """Handle returned by every callback style operation."""

    def cancel(self) -> None:
        ...

    @property
    def is_cancelled(self) -> bool:
        ...


class _NoOpCancelable:
    """Handle for operations that completed synchronously."""

    def cancel(self) -> None:
        return None

    @property
    def is_cancelled(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NoOpCancelable"


NO_OP_CANCELABLE = _NoOpCancelable()


class TaskCancelable:
    """
    Cancellation handle for one scheduled operation.

    Cancelling before the result reached the callback cancels the running
    work and drops its result. Cancelling afterwards does nothing.
    """

    def __init__(self, future: AnyFuture, operation_id: str):
        self.operation_id = operation_id
        self._future = future
        self._lock = threading.Lock()
        self._cancelled = False
        self._delivered = False

    def cancel(self) -> None:
        with self._lock:
            if self._delivered or self._cancelled:
                return
            self._cancelled = True
        logger.debug(f"Operation {self.operation_id} cancelled")
        self._future.cancel()

    @property
    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def _mark_delivered(self) -> bool:
        """Claim delivery of the result; False when cancelled first."""
        with self._lock:
            if self._cancelled:
                return False
            self._delivered = True
            return True

    def __repr__(self) -> str:
        return f"TaskCancelable(operation_id={self.operation_id!r}, cancelled={self.is_cancelled})"


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class AsyncTaskBridge:
    """
    Runs wizard operations as tasks and reports them through callbacks.

    Work is executed on ``worker_loop`` (default: the caller's running loop).
    Results are handed to the callback on ``delivery_loop`` (default: the
    caller's running loop, else the worker loop).
    """

    def __init__(
        self,
        worker_loop: Optional[asyncio.AbstractEventLoop] = None,
        delivery_loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._worker_loop = worker_loop
        self._delivery_loop = delivery_loop

    def run(
        self, work: Coroutine[Any, Any, Any], callback: ResultCallback, name: str = "operation"
    ) -> TaskCancelable:
        """
        Schedule ``work`` and report its outcome to ``callback``.

        Args:
            work: Coroutine to run
            callback: Receives Success(value) or Failure(exception)
            name: Operation name used in log lines

        Returns:
            Handle cancelling the operation

        Raises:
            RuntimeError: No worker loop given and no loop is running
        """
        caller_loop = _running_loop()
        worker_loop = self._worker_loop or caller_loop
        if worker_loop is None:
            work.close()
            raise RuntimeError("No running event loop; pass worker_loop to AsyncTaskBridge")
        delivery_loop = self._delivery_loop or caller_loop or worker_loop

        operation_id = uuid.uuid4().hex[:12]
        wrapped = self._run_in_context(work, operation_id)

        future: AnyFuture
        if worker_loop is caller_loop:
            future = worker_loop.create_task(wrapped, name=f"{name}-{operation_id}")
        else:
            future = asyncio.run_coroutine_threadsafe(wrapped, worker_loop)

        handle = TaskCancelable(future, operation_id)
        logger.debug(f"Scheduled {name} as operation {operation_id}")

        def _on_done(done: AnyFuture) -> None:
            result: Result[Any]
            if done.cancelled():
                # A finished task holds no running frame; a worker thread may still be running it
                if isinstance(done, asyncio.Future):
                    work.close()
                if handle.is_cancelled:
                    logger.debug(f"Operation {operation_id} ({name}) cancelled, result dropped")
                    return
                logger.warning(f"Operation {operation_id} ({name}) cancelled by its event loop")
                result = err(asyncio.CancelledError())
            else:
                exception = done.exception()
                result = err(exception) if exception else ok(done.result())
            delivery_loop.call_soon_threadsafe(self._deliver, handle, callback, result, name)

        future.add_done_callback(_on_done)
        return handle

    @staticmethod
    async def _run_in_context(work: Coroutine[Any, Any, Any], operation_id: str) -> Any:
        operation_id_ctx.set(operation_id)
        return await work

    @staticmethod
    def _deliver(
        handle: TaskCancelable, callback: ResultCallback, result: Result[Any], name: str
    ) -> None:
        if not handle._mark_delivered():
            logger.debug(f"Operation {handle.operation_id} ({name}) cancelled, result dropped")
            return
        callback(result)
