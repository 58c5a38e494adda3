"""The mesh connectivity graph.

:class:`MeshGraph` owns three dense collections (vertices, edges, facets)
addressed by stable index, the adjacency stored on those records, and the
three selection sets.  All structural edits go through the ``add_*`` and
``remove_*`` methods here; the higher level edits in
:mod:`cubemesh.topology` are built only on top of them.

Removal is swap-with-last: the removed slot is filled by the former last
element of the same kind and that element's index is rewritten.  Removing
an entity that is already gone is a no-op.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from cubemesh.entities import Edge, Facet, Vertex
from cubemesh.errors import (
    InternalConsistencyError,
    InvalidArgumentError,
    SlotOccupiedError,
    StaleReferenceError,
)
from cubemesh.selection import SelectionSet

logger = logging.getLogger(__name__)

Entity = Union[Vertex, Edge, Facet]


class MeshGraph:
    """Vertices, edges and facets with bidirectional adjacency."""

    def __init__(self):
        self.vertices: List[Vertex] = []
        self.edges: List[Edge] = []
        self.facets: List[Facet] = []
        self.selected_vertices: SelectionSet[Vertex] = SelectionSet()
        self.selected_edges: SelectionSet[Edge] = SelectionSet()
        self.selected_facets: SelectionSet[Facet] = SelectionSet()
        self._triangles = 0

    def __repr__(self) -> str:
        return (f"MeshGraph(vertices={len(self.vertices)}, "
                f"edges={len(self.edges)}, facets={len(self.facets)}, "
                f"triangles={self._triangles})")

    @property
    def triangles_count(self) -> int:
        return self._triangles

    # ------------------------------------------------------------------
    # store bookkeeping

    def _collection(self, entity: Entity) -> list:
        if isinstance(entity, Vertex):
            return self.vertices
        if isinstance(entity, Edge):
            return self.edges
        if isinstance(entity, Facet):
            return self.facets
        raise InvalidArgumentError(f"not a mesh entity: {entity!r}")

    def _selection(self, entity: Entity) -> SelectionSet:
        if isinstance(entity, Vertex):
            return self.selected_vertices
        if isinstance(entity, Edge):
            return self.selected_edges
        if isinstance(entity, Facet):
            return self.selected_facets
        raise InvalidArgumentError(f"not a mesh entity: {entity!r}")

    @staticmethod
    def _append(collection: list, entity: Entity) -> None:
        entity.index = len(collection)
        collection.append(entity)

    @staticmethod
    def _swap_remove(collection: list, entity: Entity) -> None:
        i = entity.index
        last = collection.pop()
        if last is not entity:
            collection[i] = last
            last.index = i
        entity.index = -1

    def contains(self, entity: Entity) -> bool:
        """Whether ``entity`` is currently stored in this graph."""

        collection = self._collection(entity)
        i = entity.index
        return 0 <= i < len(collection) and collection[i] is entity

    def is_stale(self, entity: Entity) -> bool:
        return not self.contains(entity)

    def _require(self, entity: Entity, what: str) -> None:
        if not self.contains(entity):
            raise InvalidArgumentError(f"{what} {entity!r} is not part of this graph")

    def equivalent(self, entity: Optional[Entity]) -> Optional[Entity]:
        """Return the entity of the same kind stored at ``entity.index``.

        Maps references taken on another graph (typically the source of a
        :meth:`clone`) onto this one.
        """

        if entity is None:
            return None
        collection = self._collection(entity)
        i = entity.index
        if not 0 <= i < len(collection):
            raise StaleReferenceError(f"no equivalent for {entity!r}")
        return collection[i]

    # ------------------------------------------------------------------
    # selection

    def set_selected(self, entity: Entity, selected: bool = True) -> None:
        selection = self._selection(entity)
        if not selected:
            selection.discard(entity)
            return
        if not self.contains(entity):
            raise StaleReferenceError(f"cannot select removed {entity!r}")
        selection.add(entity)

    def is_selected(self, entity: Entity) -> bool:
        return entity in self._selection(entity)

    def deselect_all(self) -> None:
        self.selected_vertices.clear()
        self.selected_edges.clear()
        self.selected_facets.clear()

    # ------------------------------------------------------------------
    # vertices

    def add_vertex(self, *args) -> Vertex:
        """Append a vertex.

        Accepts a position sequence, three coordinates, or a detached
        :class:`Vertex` record.
        """

        if len(args) == 3:
            v = Vertex(args)
        elif len(args) == 1 and isinstance(args[0], Vertex):
            v = args[0]
            if v.index != -1 or v.adjacency:
                raise InvalidArgumentError(f"{v!r} already belongs to a graph")
        elif len(args) == 1:
            v = Vertex(args[0])
        else:
            raise InvalidArgumentError("add_vertex expects a position or x, y, z")
        self._append(self.vertices, v)
        return v

    def remove_vertex(self, v: Vertex) -> None:
        if not self.contains(v):
            return
        self._swap_remove(self.vertices, v)
        self.selected_vertices.discard(v)
        for e in list(v.adjacency.values()):
            self.remove_edge(e)
        logger.debug("removed vertex, %d left", len(self.vertices))

    # ------------------------------------------------------------------
    # edges

    def add_edge(self, p1: Vertex, p2: Vertex, check_facet: bool = False) -> Edge:
        """Connect ``p1`` and ``p2``, returning the existing edge if any.

        With ``check_facet`` set, a new edge whose endpoints already lie on
        a common facet splits that facet in two along the edge.
        """

        self._require(p1, "endpoint")
        self._require(p2, "endpoint")
        if p1 is p2:
            raise InvalidArgumentError("an edge needs two distinct endpoints")

        e = p1.edge_connecting(p2)
        if e is not None:
            return e

        shared = self._shared_facet(p1, p2) if check_facet else None

        e = Edge(p1, p2)
        p1.adjacency[p2] = e
        p2.adjacency[p1] = e
        self._append(self.edges, e)

        if shared is not None:
            self._split_facet(shared, p1, p2)
        return e

    @staticmethod
    def _shared_facet(p1: Vertex, p2: Vertex) -> Optional[Facet]:
        for f in p1.facets:
            if p2 in f.vertices:
                return f
        return None

    def _split_facet(self, f: Facet, p1: Vertex, p2: Vertex) -> Tuple[Facet, Facet]:
        loop = f.vertices
        i = loop.index(p1)
        rotated = loop[i:] + loop[:i]
        j = rotated.index(p2)
        first = rotated[:j + 1]
        second = rotated[j:] + [p1]

        selected = self.is_selected(f)
        self.remove_facet(f)
        halves = self.add_facet(first), self.add_facet(second)
        if selected:
            for half in halves:
                self.set_selected(half, True)
        logger.debug("split facet into %d + %d vertex loops",
                     len(first), len(second))
        return halves

    def remove_edge(self, e: Edge) -> None:
        if not self.contains(e):
            return
        self._swap_remove(self.edges, e)
        self.selected_edges.discard(e)
        for f in (e.f1, e.f2):
            if f is not None:
                self.remove_facet(f)
        e.v1.adjacency.pop(e.v2, None)
        e.v2.adjacency.pop(e.v1, None)

    # ------------------------------------------------------------------
    # facets

    def _facet_loop(self, vertices: Sequence) -> List[Vertex]:
        if len(vertices) == 1 and not isinstance(vertices[0], Vertex):
            vertices = list(vertices[0])
        vs = list(vertices)
        if len(vs) < 3:
            raise InvalidArgumentError(f"a facet needs at least 3 vertices, got {len(vs)}")
        for v in vs:
            self._require(v, "facet vertex")
        if len(set(vs)) != len(vs):
            raise InvalidArgumentError("facet vertices must be distinct")
        return vs

    @staticmethod
    def _occupied_slot(vs: Sequence[Vertex]) -> Optional[Tuple[Edge, bool]]:
        n = len(vs)
        for i in range(n):
            tail, head = vs[i], vs[(i + 1) % n]
            e = tail.edge_connecting(head)
            if e is not None and not e.slot_is_free(tail):
                return e, e.v1 is tail
        return None

    def can_add_facet(self, *vertices) -> bool:
        """Whether :meth:`add_facet` would succeed for this winding.

        Invalid input (too few, foreign or repeated vertices) still raises
        :class:`InvalidArgumentError`; only slot conflicts give ``False``.
        """

        vs = self._facet_loop(vertices)
        return self._occupied_slot(vs) is None

    def add_facet(self, *vertices) -> Facet:
        """Add a facet over the given vertex loop.

        Missing boundary edges are created.  Every slot is checked before
        anything is changed, so a :class:`SlotOccupiedError` leaves the
        graph as it was.
        """

        vs = self._facet_loop(vertices)
        conflict = self._occupied_slot(vs)
        if conflict is not None:
            raise SlotOccupiedError(*conflict)

        f = Facet(vs)
        for tail, head in f.oriented_pairs():
            e = self.add_edge(tail, head)
            if e.v1 is tail:
                e.f1 = f
            else:
                e.f2 = f

        self._append(self.facets, f)
        self._triangles += f.triangles_count
        return f

    def remove_facet(self, f: Facet) -> None:
        if not self.contains(f):
            return
        edges = f.edges
        for e in edges:
            if e.f1 is not f and e.f2 is not f:
                raise InternalConsistencyError(
                    f"{e!r} does not reference {f!r} in either slot")

        self._swap_remove(self.facets, f)
        self._triangles -= f.triangles_count
        self.selected_facets.discard(f)
        for e in edges:
            if e.f1 is f:
                e.f1 = None
            else:
                e.f2 = None

    # ------------------------------------------------------------------
    # snapshot

    def clone(self) -> MeshGraph:
        """Deep copy with every entity at the same index."""

        mg = MeshGraph()
        mg._triangles = self._triangles

        for v in self.vertices:
            self._append(mg.vertices, Vertex(v.position))
        for e in self.edges:
            self._append(mg.edges, Edge(mg.vertices[e.v1.index], mg.vertices[e.v2.index]))
        for f in self.facets:
            self._append(mg.facets, Facet([mg.vertices[v.index] for v in f.vertices]))

        for new_e, old_e in zip(mg.edges, self.edges):
            new_e.f1 = mg.equivalent(old_e.f1)
            new_e.f2 = mg.equivalent(old_e.f2)

        for new_v, old_v in zip(mg.vertices, self.vertices):
            for other, e in old_v.adjacency.items():
                new_v.adjacency[mg.vertices[other.index]] = mg.edges[e.index]

        for v in self.selected_vertices:
            mg.selected_vertices.add(mg.vertices[v.index])
        for e in self.selected_edges:
            mg.selected_edges.add(mg.edges[e.index])
        for f in self.selected_facets:
            mg.selected_facets.add(mg.facets[f.index])
        return mg

    def extend(self, positions: Iterable[Sequence[float]]) -> List[Vertex]:
        """Add one vertex per position and return them in order."""

        return [self.add_vertex(p) for p in positions]


__all__ = ['MeshGraph', 'Entity']
