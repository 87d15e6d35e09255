"""Middleware components: normalizer, executor, container, combinators."""

from .app import App
from .combinators import After, AfterIf, Catch, Combinator, If, as_sequence
from .definition import HandlerKind, MiddlewareDefinition
from .hierarchy import HierarchyNode, hierarchy
from .logging import LoggingMiddleware
from .normalize import classify_handler, convert_to_middleware
from .pipeline import build_pipeline, execute_chain

__all__ = [
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
    "as_sequence",
    "build_pipeline",
    "classify_handler",
    "convert_to_middleware",
    "execute_chain",
    "hierarchy",
]
