"""Vertex, edge and facet records of a mesh graph.

The records carry their own adjacency (``Vertex.adjacency`` and the
``Edge.f1``/``Edge.f2`` facet slots) but never a reference to the graph
that owns them.  Every structural change goes through
:class:`cubemesh.graph.MeshGraph`, which keeps the adjacency consistent.

``index`` is the position of the record in its graph collection.  It is
rewritten when a sibling is swap-removed, so hold on to the record, not
to the number.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from cubemesh.errors import InternalConsistencyError, InvalidArgumentError
from cubemesh.vecmath import Vec3, to_vec3


class Vertex:
    """A point of the mesh plus the map from each neighbor to the edge
    connecting them."""

    __slots__ = ('index', 'position', 'adjacency')

    def __init__(self, position: Sequence[float] = (0.0, 0.0, 0.0)):
        self.index: int = -1
        self.position: Vec3 = to_vec3(position)
        self.adjacency: Dict[Vertex, Edge] = {}

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"Vertex(index={self.index}, position=({x:g}, {y:g}, {z:g}))"

    @property
    def neighbors(self) -> List[Vertex]:
        return list(self.adjacency.keys())

    @property
    def edges(self) -> List[Edge]:
        return list(self.adjacency.values())

    @property
    def facets(self) -> List[Facet]:
        """Facets touching this vertex, each reported once."""

        seen = {}
        for edge in self.adjacency.values():
            for f in (edge.f1, edge.f2):
                if f is not None:
                    seen[f] = None
        return list(seen)

    def edge_connecting(self, other: Vertex) -> Optional[Edge]:
        return self.adjacency.get(other)


class Edge:
    """Connection between two vertices.

    ``f1`` is the facet whose boundary runs ``v1 -> v2`` and ``f2`` the one
    running ``v2 -> v1``.  At most one facet per direction.
    """

    __slots__ = ('index', 'v1', 'v2', 'f1', 'f2')

    def __init__(self, v1: Vertex, v2: Vertex):
        self.index: int = -1
        self.v1 = v1
        self.v2 = v2
        self.f1: Optional[Facet] = None
        self.f2: Optional[Facet] = None

    def __repr__(self) -> str:
        return f"Edge(index={self.index}, v1={self.v1.index}, v2={self.v2.index})"

    @property
    def endpoints(self) -> Tuple[Vertex, Vertex]:
        return self.v1, self.v2

    @property
    def facets(self) -> List[Facet]:
        return [f for f in (self.f1, self.f2) if f is not None]

    @property
    def is_free(self) -> bool:
        return self.f1 is None and self.f2 is None

    @property
    def is_boundary(self) -> bool:
        return self.f1 is None or self.f2 is None

    def opposite(self, v: Vertex) -> Vertex:
        if v is self.v1:
            return self.v2
        if v is self.v2:
            return self.v1
        raise InvalidArgumentError(f"{v!r} is not an endpoint of {self!r}")

    def vertices_in_facet(self, f: Facet) -> Optional[Tuple[Vertex, Vertex]]:
        """Return the endpoints in the order ``f`` traverses them."""

        if self.f1 is f:
            return self.v1, self.v2
        if self.f2 is f:
            return self.v2, self.v1
        return None

    def slot_is_free(self, tail: Vertex) -> bool:
        """Whether a facet walking this edge away from ``tail`` fits."""

        if tail is self.v1:
            return self.f1 is None
        return self.f2 is None


class Facet:
    """Ordered vertex loop.  The order is the winding."""

    __slots__ = ('index', 'vertices')

    def __init__(self, vertices: Sequence[Vertex]):
        self.index: int = -1
        self.vertices: List[Vertex] = list(vertices)

    def __repr__(self) -> str:
        loop = ", ".join(str(v.index) for v in self.vertices)
        return f"Facet(index={self.index}, vertices=[{loop}])"

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def triangles_count(self) -> int:
        return len(self.vertices) - 2

    def oriented_pairs(self) -> Iterator[Tuple[Vertex, Vertex]]:
        """Yield ``(tail, head)`` for each boundary step of the loop."""

        n = len(self.vertices)
        for i in range(n):
            yield self.vertices[i], self.vertices[(i + 1) % n]

    @property
    def edges(self) -> List[Edge]:
        result = []
        for tail, head in self.oriented_pairs():
            edge = tail.edge_connecting(head)
            if edge is None:
                raise InternalConsistencyError(
                    f"{self!r} has no edge between vertices "
                    f"{tail.index} and {head.index}")
            result.append(edge)
        return result

    def fan(self) -> Iterator[Tuple[Vertex, Vertex, Vertex]]:
        """Yield the fan triangulation ``(v0, v[i+1], v[i+2])``."""

        v0 = self.vertices[0]
        for i in range(self.triangles_count):
            yield v0, self.vertices[i + 1], self.vertices[i + 2]


__all__ = ['Vertex', 'Edge', 'Facet']
