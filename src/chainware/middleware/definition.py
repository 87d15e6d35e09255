"""MiddlewareDefinition — canonical unit wrapping a function handler."""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import InvalidHandlerError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import MappingProxyType

    from ..ports.middleware import Continuation, IMiddleware


class HandlerKind(str, enum.Enum):
    """The three accepted handler shapes, resolved once at registration."""

    HANDLER = "handler"
    AUTO_HANDLER = "auto_handler"
    MIDDLEWARE = "middleware"


@dataclass
class MiddlewareDefinition:
    """Canonical middleware built from a plain async function.

    ``AUTO_HANDLER`` functions receive only the context and the chain
    advances after they return. ``HANDLER`` functions receive the context and
    the continuation and decide for themselves whether to call it.
    """

    handler: Callable[..., Any]
    kind: HandlerKind = HandlerKind.HANDLER
    meta: MappingProxyType[str, Any] | None = None
    middleware: tuple[IMiddleware, ...] = field(default_factory=tuple)

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        if self.kind is HandlerKind.AUTO_HANDLER:
            await self._call(ctx)
            await next_handler()
        else:
            await self._call(ctx, next_handler)

    def _call(self, *args: Any) -> Awaitable[None]:
        if not callable(self.handler):
            raise InvalidHandlerError(self.handler, "object is not callable")
        result = self.handler(*args)
        if not inspect.isawaitable(result):
            raise InvalidHandlerError(
                self.handler, "handler must return an awaitable (use 'async def')"
            )
        return result

    def __repr__(self) -> str:
        name = getattr(self.handler, "__qualname__", repr(self.handler))
        return (
            f"MiddlewareDefinition({name}, kind={self.kind.value}, meta={self.meta!r})"
        )
