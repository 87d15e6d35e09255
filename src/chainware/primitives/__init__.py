"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    ChainwareError,
    HierarchyCycleError,
    InvalidHandlerError,
    NextCalledTwiceError,
)

__all__ = [
    "ChainwareError",
    "HierarchyCycleError",
    "InvalidHandlerError",
    "NextCalledTwiceError",
]
