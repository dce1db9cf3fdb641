import threading
import time

import pytest

from bmctl.errors import OperationCancelledError
from bmctl.redfish import OperationContext, context_backoff, ensure_context, no_backoff


def test_background_context_never_expires():
    ctx = OperationContext.background()

    assert not ctx.cancelled()
    assert ctx.remaining() is None
    ctx.check()


def test_cancel_propagates_to_derived_contexts():
    parent = OperationContext.background()
    child = parent.with_timeout(60)

    parent.cancel()

    assert child.cancelled()
    with pytest.raises(OperationCancelledError) as exc:
        child.check()
    assert "cancelled" in str(exc.value)


def test_child_deadline_never_extends_parent():
    parent = OperationContext.with_deadline_in(1)
    child = parent.with_timeout(100)

    assert child.deadline == parent.deadline
    assert parent.with_timeout(None).deadline == parent.deadline


def test_expired_deadline():
    ctx = OperationContext.with_deadline_in(0)

    assert ctx.cancelled()
    assert ctx.remaining() == 0.0
    with pytest.raises(OperationCancelledError) as exc:
        ctx.check()
    assert "deadline exceeded" in str(exc.value)


def test_wait_wakes_up_on_cancel():
    ctx = OperationContext.background()
    threading.Timer(0.05, ctx.cancel).start()

    started = time.monotonic()
    with pytest.raises(OperationCancelledError):
        ctx.wait(10)
    assert time.monotonic() - started < 5


def test_wait_is_bounded_by_deadline():
    ctx = OperationContext.with_deadline_in(0.05)

    with pytest.raises(OperationCancelledError):
        ctx.wait(10)


def test_context_backoff_waits():
    started = time.monotonic()
    context_backoff(OperationContext.background(), 0.05)
    assert time.monotonic() - started >= 0.04


def test_no_backoff_still_honours_cancellation():
    ctx = OperationContext.background()
    no_backoff(ctx, 30)
    ctx.cancel()
    with pytest.raises(OperationCancelledError):
        no_backoff(ctx, 30)


def test_ensure_context():
    ctx = OperationContext.background()
    assert ensure_context(ctx) is ctx
    assert isinstance(ensure_context(None), OperationContext)
