"""hierarchy — static tree of middleware metadata for diagnostics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ..primitives.exceptions import HierarchyCycleError

if TYPE_CHECKING:
    from ..ports.middleware import IMiddleware


class HierarchyNode(BaseModel):
    """One composed unit: its meta and, if it nests others, their nodes."""

    model_config = ConfigDict(frozen=True)

    meta: dict[str, Any] | None = None
    children: list[HierarchyNode] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain nested dicts; absent ``meta`` / ``children`` are omitted."""
        data: dict[str, Any] = {}
        if self.meta is not None:
            data["meta"] = dict(self.meta)
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


HierarchyNode.model_rebuild()


def hierarchy(root: IMiddleware) -> HierarchyNode:
    """Walk *root* through its ``middleware`` field and collect ``meta``.

    Nothing is executed. The same unit may appear under several parents,
    but a unit that contains itself (directly or through descendants)
    raises :class:`~chainware.primitives.exceptions.HierarchyCycleError`.
    """
    return _walk(root, set())


def _walk(node: Any, path: set[int]) -> HierarchyNode:
    meta = getattr(node, "meta", None)
    if id(node) in path:
        raise HierarchyCycleError(meta)

    children = tuple(getattr(node, "middleware", None) or ())
    if not children:
        return HierarchyNode(meta=_plain(meta))

    path.add(id(node))
    try:
        nodes = [_walk(child, path) for child in children]
    finally:
        path.discard(id(node))
    return HierarchyNode(meta=_plain(meta), children=nodes)


def _plain(meta: Any) -> dict[str, Any] | None:
    return dict(meta) if meta is not None else None
