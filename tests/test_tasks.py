"""Tests for the coroutine to callback bridge."""

import asyncio
import gc
import threading
import warnings

import pytest

from login_wizard.core.logger import operation_id_ctx
from login_wizard.core.result import Failure, Success
from login_wizard.services.auth.tasks import NO_OP_CANCELABLE, AsyncTaskBridge


class CallbackRecorder:
    """Callback collecting results and signalling the first one."""

    def __init__(self):
        self.results = []
        self.threads = []
        self.received = asyncio.Event()

    def __call__(self, result):
        self.results.append(result)
        self.threads.append(threading.get_ident())
        self.received.set()


async def settle(rounds: int = 5) -> None:
    """Let scheduled callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestAsyncTaskBridge:
    """Tests for AsyncTaskBridge."""

    @pytest.mark.asyncio
    async def test_success_delivered(self):
        """Test a returned value reaches the callback as Success."""
        callback = CallbackRecorder()

        async def work():
            return 42

        AsyncTaskBridge().run(work(), callback)
        await asyncio.wait_for(callback.received.wait(), timeout=1)

        assert callback.results == [Success(42)]

    @pytest.mark.asyncio
    async def test_failure_delivered(self):
        """Test a raised exception reaches the callback as Failure."""
        callback = CallbackRecorder()
        error = ValueError("boom")

        async def work():
            raise error

        AsyncTaskBridge().run(work(), callback)
        await asyncio.wait_for(callback.received.wait(), timeout=1)

        assert len(callback.results) == 1
        result = callback.results[0]
        assert isinstance(result, Failure)
        assert result.exception is error

    @pytest.mark.asyncio
    async def test_cancel_before_completion_suppresses_delivery(self):
        """Test cancelling a running operation drops its result."""
        callback = CallbackRecorder()
        started = asyncio.Event()
        was_cancelled = asyncio.Event()

        async def work():
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                was_cancelled.set()
                raise
            return "late"

        handle = AsyncTaskBridge().run(work(), callback)
        await started.wait()
        handle.cancel()
        await asyncio.wait_for(was_cancelled.wait(), timeout=1)
        await settle()

        assert handle.is_cancelled
        assert callback.results == []

    @pytest.mark.asyncio
    async def test_cancel_before_start(self):
        """Test cancelling an operation that never started."""
        callback = CallbackRecorder()

        async def work():
            return "never"

        handle = AsyncTaskBridge().run(work(), callback)
        handle.cancel()
        await settle()

        assert callback.results == []

    @pytest.mark.asyncio
    async def test_cancel_before_start_leaves_no_unawaited_coroutine(self):
        """Test work that never ran is closed instead of leaking."""

        async def work():
            return "never"

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            handle = AsyncTaskBridge().run(work(), CallbackRecorder())
            handle.cancel()
            await settle()
            gc.collect()

        assert not [w for w in caught if "was never awaited" in str(w.message)]

    @pytest.mark.asyncio
    async def test_cancel_after_completion_before_delivery(self):
        """Test a finished result still queued for delivery is dropped."""
        callback = CallbackRecorder()

        async def work():
            return "done"

        handle = AsyncTaskBridge().run(work(), callback)
        # One iteration runs the task; delivery is scheduled for the next one
        await asyncio.sleep(0)
        handle.cancel()
        await settle()

        assert callback.results == []

    @pytest.mark.asyncio
    async def test_cancel_after_delivery_is_noop(self):
        """Test cancelling a delivered operation changes nothing."""
        callback = CallbackRecorder()

        async def work():
            return "done"

        handle = AsyncTaskBridge().run(work(), callback)
        await asyncio.wait_for(callback.received.wait(), timeout=1)
        handle.cancel()

        assert handle.is_cancelled is False
        assert callback.results == [Success("done")]

    @pytest.mark.asyncio
    async def test_cancellation_not_requested_by_handle_is_reported(self):
        """Test work cancelled without the handle still reaches the callback as Failure."""
        callback = CallbackRecorder()

        async def work():
            raise asyncio.CancelledError()

        handle = AsyncTaskBridge().run(work(), callback)
        await asyncio.wait_for(callback.received.wait(), timeout=1)

        assert handle.is_cancelled is False
        assert len(callback.results) == 1
        assert isinstance(callback.results[0], Failure)
        assert isinstance(callback.results[0].exception, asyncio.CancelledError)

    @pytest.mark.asyncio
    async def test_task_cancelled_by_loop_is_reported(self):
        """Test a task cancelled directly on its loop notifies the callback."""
        callback = CallbackRecorder()
        started = asyncio.Event()

        async def work():
            started.set()
            await asyncio.sleep(10)

        AsyncTaskBridge().run(work(), callback, name="slow")
        await started.wait()
        task = next(t for t in asyncio.all_tasks() if t.get_name().startswith("slow-"))
        task.cancel()
        await asyncio.wait_for(callback.received.wait(), timeout=1)

        assert isinstance(callback.results[0].exception, asyncio.CancelledError)

    @pytest.mark.asyncio
    async def test_operation_id_bound_during_work(self):
        """Test the operation id is visible to the work and not to the caller."""
        callback = CallbackRecorder()

        async def work():
            return operation_id_ctx.get()

        handle = AsyncTaskBridge().run(work(), callback)
        await asyncio.wait_for(callback.received.wait(), timeout=1)

        assert callback.results == [Success(handle.operation_id)]
        assert operation_id_ctx.get() is None

    @pytest.mark.asyncio
    async def test_worker_loop_in_other_thread(self):
        """Test work runs on a worker loop and the result comes back to the caller loop."""
        worker_loop = asyncio.new_event_loop()
        worker_thread = threading.Thread(target=worker_loop.run_forever, daemon=True)
        worker_thread.start()
        try:
            callback = CallbackRecorder()

            async def work():
                return threading.get_ident()

            AsyncTaskBridge(worker_loop=worker_loop).run(work(), callback)
            await asyncio.wait_for(callback.received.wait(), timeout=2)

            assert callback.results == [Success(worker_thread.ident)]
            assert callback.threads == [threading.get_ident()]
        finally:
            worker_loop.call_soon_threadsafe(worker_loop.stop)
            worker_thread.join(timeout=2)
            worker_loop.close()

    def test_run_without_loop_raises(self):
        """Test a bridge with no loop available refuses to schedule."""

        async def work():
            return None

        with pytest.raises(RuntimeError, match="No running event loop"):
            AsyncTaskBridge().run(work(), lambda result: None)

    def test_no_op_cancelable(self):
        """Test the synchronous completion handle."""
        NO_OP_CANCELABLE.cancel()
        assert NO_OP_CANCELABLE.is_cancelled is False
