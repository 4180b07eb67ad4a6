"""Completion strategies — normalizes the three ways a render function can finish.

A render function either returns its renderable value, receives a ``done``
callback it calls later, or is a coroutine function whose awaited result is
the value. The strategy is detected once, when the example is registered,
and :func:`run_render_fn` turns every strategy into one awaitable.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import Any, Callable

from snapshotter.models.example import CompletionStrategy

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def detect_strategy(render_fn: Callable[..., Any]) -> CompletionStrategy:
    """Pick the completion strategy from the callable's declared shape."""
    if not callable(render_fn):
        raise TypeError(f"Render function must be callable, got {type(render_fn).__name__}")
    if inspect.iscoroutinefunction(render_fn):
        return CompletionStrategy.AWAITABLE
    try:
        signature = inspect.signature(render_fn)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are called with no arguments
        return CompletionStrategy.RETURN
    required = [
        p for p in signature.parameters.values()
        if p.kind in _POSITIONAL and p.default is inspect.Parameter.empty
    ]
    if len(required) > 1:
        raise TypeError(
            f"Render function takes {len(required)} required arguments; "
            "expected none or a single done callback"
        )
    return CompletionStrategy.CALLBACK if required else CompletionStrategy.RETURN


class DoneCallback:
    """The ``done`` argument handed to callback-style render functions.

    ``done(value)`` resolves the render, ``done.fail(error)`` rejects it.
    Only the first call counts. Safe to call from any thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future):
        self._loop = loop
        self._future = future

    def __call__(self, value: Any = None) -> None:
        self._schedule(value, None)

    def fail(self, error: BaseException | str) -> None:
        if not isinstance(error, BaseException):
            error = RuntimeError(str(error))
        self._schedule(None, error)

    def _schedule(self, value: Any, error: BaseException | None) -> None:
        try:
            self._loop.call_soon_threadsafe(self._settle, value, error)
        except RuntimeError:
            # The run already finished; an abandoned render completed too late
            logger.debug("Dropping completion of a render after its event loop closed")

    def _settle(self, value: Any, error: BaseException | None) -> None:
        if self._future.done():
            logger.debug("Ignoring repeated completion of a render callback")
            return
        if error is not None:
            self._future.set_exception(error)
        else:
            self._future.set_result(value)


def _call_in_thread(target: Callable[[], Any], done: DoneCallback, name: str) -> None:
    """Run a blocking call on a daemon thread, settling ``done`` if it raises.

    A call that overruns the render timeout is abandoned, not killed: the
    thread keeps running until the function returns, and its late completion
    is ignored.
    """
    def _worker() -> None:
        try:
            target()
        except BaseException as e:
            done.fail(e)

    threading.Thread(target=_worker, name=f"render:{name}", daemon=True).start()


async def run_render_fn(
    render_fn: Callable[..., Any],
    strategy: CompletionStrategy,
    name: str = "example",
) -> Any:
    """Invoke a render function and wait until it produced its value.

    Plain and callback functions run off the event loop, so a blocking render
    can time out without stalling other units. Coroutine functions run on
    the loop.
    """
    if strategy is CompletionStrategy.AWAITABLE:
        return await render_fn()

    loop = asyncio.get_running_loop()
    future = loop.create_future()
    done = DoneCallback(loop, future)
    if strategy is CompletionStrategy.CALLBACK:
        _call_in_thread(lambda: render_fn(done), done, name)
    else:
        _call_in_thread(lambda: done(render_fn()), done, name)

    result = await future
    # Plain functions may still hand back a future or other awaitable
    if inspect.isawaitable(result):
        result = await result
    return result
