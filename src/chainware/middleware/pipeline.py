"""build_pipeline — construct the continuation chain over a context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import NextCalledTwiceError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

    from ..ports.middleware import Continuation, IMiddleware


async def _done() -> None:
    """Terminal continuation used when the caller supplies none."""


def _single_use(index: int, continuation: Continuation) -> Continuation:
    """Guard *continuation* so the middleware at *index* can resume it once."""
    called = False

    def _next() -> Awaitable[None]:
        nonlocal called
        if called:
            raise NextCalledTwiceError(index)
        called = True
        return continuation()

    return _next


def build_pipeline(
    sequence: Iterable[IMiddleware],
    ctx: Any,
    terminal: Continuation | None = None,
) -> Continuation:
    """Build the continuation chain for one execution over *ctx*.

    The chain is built from the end of *sequence* toward the front, so the
    returned continuation runs the first unit, whose ``next_handler`` runs
    the second, and so on until *terminal*. *sequence* is snapshotted: later
    registrations do not affect an already-built chain.

    Continuations are plain functions returning the next unit's ``process``
    awaitable, so they add no frames of their own. While the chain is
    running, each unit still holds its ``process`` frame (plus the handler
    frame for a full handler) until the remainder returns. Chain depth is
    therefore bounded by :func:`sys.getrecursionlimit`: roughly that many
    auto handlers, or half as many full handlers.
    """
    units = tuple(sequence)
    pipeline: Continuation = terminal if terminal is not None else _done

    for index in range(len(units) - 1, -1, -1):
        current_next = _single_use(index, pipeline)  # capture for closure

        def _step(
            _mw: IMiddleware = units[index],
            _next: Continuation = current_next,
        ) -> Awaitable[None]:
            return _mw.process(ctx, _next)

        pipeline = _step

    return pipeline


async def execute_chain(
    sequence: Iterable[IMiddleware],
    ctx: Any,
    terminal: Continuation | None = None,
) -> None:
    """Run *sequence* over *ctx*, finishing with *terminal* if it is reached.

    Exceptions raised anywhere in the chain propagate to the caller
    unchanged.
    """
    await build_pipeline(sequence, ctx, terminal)()
