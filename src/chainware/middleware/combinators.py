"""Combinators — If, AfterIf, After and Catch, built on the chain executor."""

from __future__ import annotations

import abc
import inspect
import logging
from typing import TYPE_CHECKING, Any

from .normalize import convert_to_middleware, freeze_meta
from .pipeline import execute_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from types import MappingProxyType

    from ..ports.middleware import Continuation, HandlerLike, IMiddleware, Meta

    Predicate = Callable[[Any], "bool | Awaitable[bool]"]
    ErrorHandler = Callable[[Exception, Any], "Awaitable[None] | None"]

logger = logging.getLogger(__name__)


def as_sequence(
    middleware: HandlerLike | Iterable[HandlerLike],
) -> tuple[IMiddleware, ...]:
    """Normalize a single handler, an App, or an iterable of handlers."""
    if callable(middleware) or callable(getattr(middleware, "process", None)):
        return (convert_to_middleware(middleware),)  # type: ignore[arg-type]
    handlers: Iterable[HandlerLike] = middleware  # type: ignore[assignment]
    return tuple(convert_to_middleware(h) for h in handlers)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Combinator(abc.ABC):
    """Shared plumbing: inner sequence plus descriptive meta."""

    def __init__(
        self,
        middleware: HandlerLike | Iterable[HandlerLike],
        *,
        meta: Meta | None = None,
    ) -> None:
        self.meta: MappingProxyType[str, Any] | None = freeze_meta(
            meta if meta is not None else {"name": type(self).__name__}
        )
        self._middleware = as_sequence(middleware)

    @property
    def middleware(self) -> tuple[IMiddleware, ...]:
        return self._middleware

    @abc.abstractmethod
    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        """Run the inner sequence relative to the outer chain."""

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}(meta={self.meta!r}, middleware={len(self._middleware)})"


class If(Combinator):
    """Run the inner sequence only when *predicate* holds.

    When the predicate is false the inner sequence is skipped and the outer
    chain resumes. When it is true the inner sequence runs, then the outer
    chain resumes unless ``terminate_on_true`` is set.
    """

    def __init__(
        self,
        predicate: Predicate,
        middleware: HandlerLike | Iterable[HandlerLike],
        terminate_on_true: bool = False,
        *,
        meta: Meta | None = None,
    ) -> None:
        super().__init__(middleware, meta=meta)
        self.predicate = predicate
        self.terminate_on_true = terminate_on_true

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        if not await _resolve(self.predicate(ctx)):
            await next_handler()
            return

        logger.debug("%r: predicate matched, running inner sequence", self)
        await execute_chain(self._middleware, ctx)
        if not self.terminate_on_true:
            await next_handler()


class AfterIf(Combinator):
    """Resume the outer chain first, then run the inner sequence if
    *predicate* holds for the context as the outer chain left it."""

    def __init__(
        self,
        predicate: Predicate,
        middleware: HandlerLike | Iterable[HandlerLike],
        *,
        meta: Meta | None = None,
    ) -> None:
        super().__init__(middleware, meta=meta)
        self.predicate = predicate

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        await next_handler()
        if await _resolve(self.predicate(ctx)):
            logger.debug("%r: predicate matched, running inner sequence", self)
            await execute_chain(self._middleware, ctx)


def _always(_ctx: Any) -> bool:
    return True


class After(AfterIf):
    """Resume the outer chain, then always run the inner sequence."""

    def __init__(
        self,
        middleware: HandlerLike | Iterable[HandlerLike],
        *,
        meta: Meta | None = None,
    ) -> None:
        super().__init__(_always, middleware, meta=meta)


class Catch(Combinator):
    """Intercept exceptions raised inside the inner sequence.

    The inner sequence runs with the outer ``next_handler`` as its terminal,
    so the outer chain resumes only if the inner sequence reaches its end.
    An exception raised inside the inner sequence is passed to
    ``error_handler(err, ctx)`` and not re-raised. An exception raised by the
    outer remainder passes through untouched when it reaches ``Catch``
    unchanged, as does anything that is not an ``Exception`` (e.g. task
    cancellation). If an inner unit swallows that exception and raises its
    own, the new one is handled like any other inner failure.
    """

    def __init__(
        self,
        error_handler: ErrorHandler,
        middleware: HandlerLike | Iterable[HandlerLike],
        *,
        meta: Meta | None = None,
    ) -> None:
        super().__init__(middleware, meta=meta)
        self.error_handler = error_handler

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        downstream_exc: Exception | None = None

        async def _resume() -> None:
            nonlocal downstream_exc
            try:
                await next_handler()
            except Exception as exc:
                downstream_exc = exc
                raise

        try:
            await execute_chain(self._middleware, ctx, _resume)
        except Exception as exc:
            if exc is downstream_exc:
                raise
            logger.debug("%r intercepted %s: %s", self, type(exc).__name__, exc)
            await _resolve(self.error_handler(exc, ctx))

