"""chainware — continuation-passing middleware composition for asyncio.

Register handlers on an :class:`App`, run them over a shared context with
:meth:`App.execute`, and compose with :class:`If`, :class:`AfterIf`,
:class:`After` and :class:`Catch`.
"""

from __future__ import annotations

# ── Instrumentation ─────────────────────────────────────────────
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)

# ── Middleware ───────────────────────────────────────────────────
from .middleware import (
    After,
    AfterIf,
    App,
    Catch,
    Combinator,
    HandlerKind,
    HierarchyNode,
    If,
    LoggingMiddleware,
    MiddlewareDefinition,
    build_pipeline,
    classify_handler,
    convert_to_middleware,
    execute_chain,
    hierarchy,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import (
    AutoHandler,
    Continuation,
    Handler,
    HandlerLike,
    IMiddleware,
    Meta,
)

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    ChainwareError,
    HierarchyCycleError,
    InvalidHandlerError,
    NextCalledTwiceError,
)

__version__ = "0.1.0"

__all__: list[str] = [
    # Middleware
    "After",
    "AfterIf",
    "App",
    "Catch",
    "Combinator",
    "HandlerKind",
    "HierarchyNode",
    "If",
    "LoggingMiddleware",
    "MiddlewareDefinition",
    "build_pipeline",
    "classify_handler",
    "convert_to_middleware",
    "execute_chain",
    "hierarchy",
    # Instrumentation
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "set_hook_registry",
    # Ports
    "AutoHandler",
    "Continuation",
    "Handler",
    "HandlerLike",
    "IMiddleware",
    "Meta",
    # Primitives
    "ChainwareError",
    "HierarchyCycleError",
    "InvalidHandlerError",
    "NextCalledTwiceError",
]
