"""Selection state of a mesh graph.

Selection is UI metadata: it never influences topology, but the graph
drops removed entities from their set so the renderer never sees them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Generic, Iterable, Iterator, Optional, TypeVar

from cubemesh.entities import Edge, Facet, Vertex

if TYPE_CHECKING:  # pragma: no cover
    from cubemesh.graph import MeshGraph

T = TypeVar('T')


class SelectionSet(Generic[T]):
    """Membership set that remembers insertion order."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: Dict[T, None] = dict.fromkeys(items)

    def __contains__(self, item) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._items)!r})"

    def add(self, item: T) -> None:
        self._items[item] = None

    def discard(self, item: T) -> None:
        self._items.pop(item, None)

    def clear(self) -> None:
        self._items.clear()

    def first(self) -> Optional[T]:
        return next(iter(self._items), None)

    def last(self) -> Optional[T]:
        return next(reversed(self._items), None) if self._items else None


def select_vertex(graph: "MeshGraph", v: Vertex) -> None:
    graph.set_selected(v, True)


def select_edge(graph: "MeshGraph", e: Edge) -> None:
    """Select an edge together with both endpoints."""

    graph.set_selected(e, True)
    graph.set_selected(e.v1, True)
    graph.set_selected(e.v2, True)


def select_facet(graph: "MeshGraph", f: Facet) -> None:
    """Select a facet, its boundary edges and their endpoints."""

    graph.set_selected(f, True)
    for e in f.edges:
        select_edge(graph, e)


def select_adjacency(graph: "MeshGraph", v: Vertex) -> None:
    """Select a vertex, every edge at it and every facet on those edges."""

    graph.set_selected(v, True)
    for e in v.edges:
        graph.set_selected(e, True)
        for f in e.facets:
            graph.set_selected(f, True)


def select_all(graph: "MeshGraph") -> None:
    for v in graph.vertices:
        graph.set_selected(v, True)
    for e in graph.edges:
        graph.set_selected(e, True)
    for f in graph.facets:
        graph.set_selected(f, True)


def select_neighbours(graph: "MeshGraph") -> None:
    """Grow the selection by one ring of vertices.

    Edges between selected vertices and facets whose vertices are all
    selected join the selection too.
    """

    ring = set()
    for v in graph.selected_vertices:
        ring.update(v.neighbors)
    for v in ring:
        graph.set_selected(v, True)

    for v in list(graph.selected_vertices):
        for other, e in v.adjacency.items():
            if graph.is_selected(other):
                graph.set_selected(e, True)
    for f in graph.facets:
        if all(graph.is_selected(v) for v in f.vertices):
            graph.set_selected(f, True)


__all__ = [
    'SelectionSet',
    'select_vertex',
    'select_edge',
    'select_facet',
    'select_adjacency',
    'select_all',
    'select_neighbours',
]
