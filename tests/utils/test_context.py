import pytest

from nodezero.agent.errors import RequestCancelledError
from nodezero.utils.context import Context


def test_background_context_never_expires():
    ctx = Context.background()
    assert ctx.remaining() is None
    assert not ctx.done()
    assert ctx.bound_timeout(30) == 30
    ctx.raise_if_done()


def test_cancel_runs_callbacks_once():
    calls = []
    ctx = Context.background()
    ctx.on_cancel(lambda: calls.append("a"))
    ctx.cancel()
    ctx.cancel()
    assert calls == ["a"]
    with pytest.raises(RequestCancelledError, match="cancelled"):
        ctx.raise_if_done()


def test_callback_registered_after_cancel_runs_immediately():
    calls = []
    ctx = Context.background()
    ctx.cancel()
    ctx.on_cancel(lambda: calls.append("late"))
    assert calls == ["late"]


def test_expired_deadline():
    ctx = Context(deadline=0.0)
    assert ctx.done()
    assert ctx.bound_timeout(30) == 0.0
    with pytest.raises(RequestCancelledError, match="deadline exceeded"):
        ctx.raise_if_done()


def test_unregistered_callback_is_not_run():
    calls = []
    ctx = Context.background()
    unregister = ctx.on_cancel(lambda: calls.append("gone"))
    unregister()
    unregister()
    ctx.cancel()
    assert calls == []


def test_failing_callback_does_not_skip_the_rest():
    calls = []
    ctx = Context.background()

    def broken():
        raise OSError("already closed")

    ctx.on_cancel(broken)
    ctx.on_cancel(lambda: calls.append("after"))
    ctx.cancel()
    assert calls == ["after"]
    assert ctx.cancelled
