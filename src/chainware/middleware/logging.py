"""LoggingMiddleware — logs the remainder of the chain as it runs."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .normalize import freeze_meta

if TYPE_CHECKING:
    from types import MappingProxyType

    from ..ports.middleware import Continuation, IMiddleware

_log = logging.getLogger("chainware.middleware")


class LoggingMiddleware:
    """Logs entry, duration and failure of everything registered after it.

    Place it first in an App to time a whole execution, or just before a
    group of units to time only that group.
    """

    def __init__(
        self,
        name: str = "chain",
        *,
        logger: logging.Logger | None = None,
        level: int = logging.INFO,
    ) -> None:
        self.meta: MappingProxyType[str, Any] | None = freeze_meta(
            {"name": "LoggingMiddleware", "label": name}
        )
        self.middleware: tuple[IMiddleware, ...] = ()
        self._name = name
        self._log = logger or _log
        self._level = level

    async def process(self, ctx: Any, next_handler: Continuation) -> None:
        """Log the remainder of the chain."""
        ctx_name = type(ctx).__name__
        self._log.log(self._level, "Entering %s (context=%s)", self._name, ctx_name)
        start = time.perf_counter()
        try:
            await next_handler()
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            self._log.exception("%s failed after %.2fms", self._name, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._log.log(self._level, "%s completed in %.2fms", self._name, elapsed)
