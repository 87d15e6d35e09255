from chainware.ports.middleware import (
    AutoHandler,
    Continuation,
    Handler,
    HandlerLike,
    IMiddleware,
    Meta,
    TContext,
)

__all__ = [
    "AutoHandler",
    "Continuation",
    "Handler",
    "HandlerLike",
    "IMiddleware",
    "Meta",
    "TContext",
]
