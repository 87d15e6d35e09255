"""App — ordered, nestable container of middleware."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic

from ..instrumentation import get_hook_registry
from ..ports.middleware import TContext
from .normalize import convert_to_middleware, freeze_meta
from .pipeline import execute_chain

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from types import MappingProxyType

    from ..ports.middleware import Continuation, HandlerLike, IMiddleware, Meta

logger = logging.getLogger(__name__)


class App(Generic[TContext]):
    """Holds an ordered sequence of middleware and runs it over a context.

    An ``App`` is itself middleware: registering one App inside another runs
    the inner sequence in place, with the outer remainder as its terminal.

    Usage::

        app = App(meta={"name": "api"})
        app.use(authenticate).use(load_user, {"name": "load_user"})

        @app.add(meta={"name": "audit"})
        async def audit(ctx):
            ctx.audited = True

        await app.execute(ctx)
    """

    def __init__(
        self,
        middleware: Iterable[HandlerLike] | None = None,
        *,
        meta: Meta | None = None,
    ) -> None:
        self.meta: MappingProxyType[str, Any] | None = freeze_meta(meta)
        self._middleware: list[IMiddleware] = []
        for handler in middleware or ():
            self.use(handler)

    # ── Registration ─────────────────────────────────────────────

    def use(self, handler: HandlerLike, meta: Meta | None = None) -> App[TContext]:
        """Normalize *handler* and append it; returns ``self`` for chaining.

        Unsupported shapes are accepted here and fail when executed.
        """
        unit = convert_to_middleware(handler, meta)
        self._middleware.append(unit)
        logger.debug(
            "Registered middleware %r on %s at position %d",
            unit,
            self.name or "app",
            len(self._middleware) - 1,
        )
        return self

    def add(
        self,
        handler: HandlerLike | None = None,
        *,
        meta: Meta | None = None,
    ) -> Any:
        """Decorator-style registration.

        Usage::

            @app.add
            async def step(ctx): ...

            @app.add(meta={"name": "guard"})
            async def guard(ctx, next_handler): ...
        """
        if handler is None:
            # Called as @app.add(meta=...)
            def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
                self.use(func, meta)
                return func

            return wrapper

        # Called as @app.add
        self.use(handler, meta)
        return handler

    # ── Execution ────────────────────────────────────────────────

    async def execute(
        self, ctx: TContext, terminal: Continuation | None = None
    ) -> None:
        """Run the registered middleware over *ctx*.

        Returns once the chain completes or is truncated; re-raises the
        first uncaught exception from the chain.
        """
        await self._run("app.execute", ctx, terminal)

    async def process(self, ctx: TContext, next_handler: Continuation) -> None:
        """Run as a nested middleware, resuming the outer chain at the end."""
        await self._run("app.process", ctx, next_handler)

    @staticmethod
    async def run(
        sequence: Iterable[IMiddleware],
        ctx: Any,
        terminal: Continuation | None = None,
    ) -> None:
        """Execute an explicit sequence of canonical middleware."""
        await execute_chain(sequence, ctx, terminal)

    async def _run(
        self,
        operation: str,
        ctx: TContext,
        terminal: Continuation | None,
    ) -> None:
        units = tuple(self._middleware)

        async def _chain() -> None:
            await execute_chain(units, ctx, terminal)

        await get_hook_registry().execute_all(
            operation, {"app": self.name, "size": len(units)}, _chain
        )

    # ── Introspection ────────────────────────────────────────────

    @property
    def name(self) -> str | None:
        if self.meta is None:
            return None
        return self.meta.get("name")

    @property
    def middleware(self) -> tuple[IMiddleware, ...]:
        """Snapshot of the registered units, in order."""
        return tuple(self._middleware)

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[IMiddleware]:
        return iter(self.middleware)

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> App[TContext]:
        """Remove all registrations (testing utility)."""
        self._middleware.clear()
        return self

    def __repr__(self) -> str:
        return f"App(name={self.name!r}, middleware={len(self._middleware)})"
