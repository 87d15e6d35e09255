"""IMiddleware — continuation-passing middleware protocol."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import (
    Any,
    Protocol,
    Union,
    runtime_checkable,
)

from typing_extensions import TypeAlias, TypeVar

TContext = TypeVar("TContext", default=Any)

#: Zero-argument async callable representing "the rest of the chain".
Continuation: TypeAlias = Callable[[], Awaitable[None]]

#: ``async def handler(ctx, next_handler)``: must call ``next_handler`` itself.
Handler: TypeAlias = Callable[[Any, Continuation], Awaitable[None]]

#: ``async def handler(ctx)``: the chain advances once it returns.
AutoHandler: TypeAlias = Callable[[Any], Awaitable[None]]

Meta: TypeAlias = Mapping[str, Any]


@runtime_checkable
class IMiddleware(Protocol):
    """Protocol for a canonical unit in a continuation chain.

    Implementations may also expose two optional, purely descriptive
    attributes: ``meta`` (a mapping such as ``{"name": "auth"}``) and
    ``middleware`` (an ordered sequence of child units). The engine never
    runs ``middleware`` children on its own; they exist for
    :func:`~chainware.middleware.hierarchy.hierarchy`.
    """

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        """Run this unit and decide whether to resume the chain.

        Parameters
        ----------
        ctx:
            The caller-defined context shared by the whole execution.
        next_handler:
            Zero-argument async callable running everything after this
            unit. Not calling it truncates the chain without error.
        """
        ...


#: Anything ``convert_to_middleware`` accepts.
HandlerLike: TypeAlias = Union[IMiddleware, Handler, AutoHandler]
