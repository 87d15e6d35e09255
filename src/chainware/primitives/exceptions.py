"""Exceptions raised by the chainware engine itself.

Faults raised by user handlers are never wrapped: they propagate unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class ChainwareError(Exception):
    """Root exception for the chainware engine."""


class InvalidHandlerError(ChainwareError, TypeError):
    """Raised when a registered handler cannot be invoked as middleware.

    Shapes are accepted optimistically at registration; this surfaces only
    when the chain reaches the offending unit.
    """

    def __init__(self, handler: Any, reason: str) -> None:
        self.handler = handler
        self.reason = reason
        super().__init__(f"Invalid middleware handler {handler!r}: {reason}")


class NextCalledTwiceError(ChainwareError, RuntimeError):
    """Raised when a middleware invokes its continuation more than once.

    ``index`` is the position of the offending middleware in the sequence
    that was executing.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(
            f"next_handler() called more than once by middleware at index {index}"
        )


class HierarchyCycleError(ChainwareError, ValueError):
    """Raised when introspection revisits a node on its own ancestry path."""

    def __init__(self, meta: Mapping[str, Any] | None) -> None:
        self.meta = dict(meta) if meta is not None else None
        super().__init__(f"Cycle detected in middleware hierarchy at {self.meta!r}")
