"""convert_to_middleware — fold every accepted handler shape into one."""

from __future__ import annotations

import contextlib
import inspect
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, cast

from .definition import HandlerKind, MiddlewareDefinition

if TYPE_CHECKING:
    from ..ports.middleware import HandlerLike, IMiddleware, Meta

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _declared_arity(func: Any) -> int | None:
    """Count required positional parameters, or ``None`` if unknowable.

    Parameters with defaults are not counted; ``*args`` makes the arity
    open-ended and also yields ``None``.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    arity = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in _POSITIONAL and param.default is inspect.Parameter.empty:
            arity += 1
    return arity


def classify_handler(handler: Any) -> HandlerKind:
    """Resolve which of the three accepted shapes *handler* has.

    Objects exposing a callable ``process`` are middleware; callables taking
    exactly one positional argument are auto handlers; everything else is
    treated as a full handler. Unsupported shapes are not rejected here:
    they fail when the chain invokes them.
    """
    if callable(getattr(handler, "process", None)):
        return HandlerKind.MIDDLEWARE
    if callable(handler) and _declared_arity(handler) == 1:
        return HandlerKind.AUTO_HANDLER
    return HandlerKind.HANDLER


def freeze_meta(meta: Meta | None) -> MappingProxyType[str, Any] | None:
    """Snapshot *meta* into a read-only mapping."""
    if meta is None:
        return None
    return MappingProxyType(dict(meta))


def convert_to_middleware(
    handler: HandlerLike, meta: Meta | None = None
) -> IMiddleware:
    """Normalize *handler* into a canonical middleware unit.

    Middleware objects are returned as-is, which makes the conversion
    idempotent. When *meta* is given and the object carries none, *meta* is
    attached to it; existing meta is never replaced.
    """
    kind = classify_handler(handler)
    if kind is HandlerKind.MIDDLEWARE:
        unit = cast("IMiddleware", handler)
        if meta is not None and getattr(unit, "meta", None) is None:
            with contextlib.suppress(AttributeError, TypeError):
                unit.meta = freeze_meta(meta)  # type: ignore[attr-defined]
        return unit

    logger.debug("Normalized %r as %s", handler, kind.value)
    return MiddlewareDefinition(handler=handler, kind=kind, meta=freeze_meta(meta))
