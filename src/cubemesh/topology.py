"""Higher level edits built on the :class:`~cubemesh.graph.MeshGraph` mutator.

Every function here is a synchronous sequence of ``add_*``/``remove_*``
calls.  When one of those calls raises half way, the graph keeps whatever
the completed calls produced; take a :meth:`MeshGraph.clone` first when
the edit has to be all-or-nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from cubemesh.entities import Edge, Facet, Vertex
from cubemesh.errors import AmbiguousBoundaryError, InvalidArgumentError, StaleReferenceError
from cubemesh.graph import MeshGraph
from cubemesh.selection import select_facet
from cubemesh.vecmath import dot, lerp, to_vec3, triangle_normal

logger = logging.getLogger(__name__)


@dataclass
class Boundary:
    """Outer boundary of a facet set.

    ``oriented`` maps each boundary edge to ``(tail, head)`` in the order
    its selected facet walks it.  ``internal`` lists edges shared by two
    facets of the set.
    """

    oriented: Dict[Edge, Tuple[Vertex, Vertex]] = field(default_factory=dict)
    internal: List[Edge] = field(default_factory=list)


def _live_facets(graph: MeshGraph, facets: Iterable[Facet]) -> List[Facet]:
    fs = list(dict.fromkeys(facets))
    if not fs:
        raise InvalidArgumentError("no facets given")
    for f in fs:
        if not graph.contains(f):
            raise StaleReferenceError(f"{f!r} was removed from the graph")
    return fs


def boundary_edges(facets: Iterable[Facet]) -> Boundary:
    boundary = Boundary()
    internal: Dict[Edge, None] = {}
    for f in facets:
        for (tail, head), e in zip(f.oriented_pairs(), f.edges):
            if e in internal:
                continue
            if e in boundary.oriented:
                del boundary.oriented[e]
                internal[e] = None
            else:
                boundary.oriented[e] = (tail, head)
    boundary.internal = list(internal)
    return boundary


def _outgoing(boundary: Boundary) -> Dict[Vertex, List[Vertex]]:
    outgoing: Dict[Vertex, List[Vertex]] = {}
    for tail, head in boundary.oriented.values():
        outgoing.setdefault(tail, []).append(head)
    return outgoing


def boundary_loop(boundary: Boundary) -> List[Vertex]:
    """Walk the oriented boundary edges into one closed vertex loop."""

    if not boundary.oriented:
        raise AmbiguousBoundaryError("the facets enclose a closed surface with no boundary")

    outgoing = _outgoing(boundary)
    start, current = next(iter(boundary.oriented.values()))
    loop = [start]
    while current is not start:
        heads = outgoing.get(current, [])
        if len(heads) != 1 or len(loop) >= len(boundary.oriented):
            raise AmbiguousBoundaryError("cannot determine an unambiguous boundary")
        loop.append(current)
        current = heads[0]

    if len(loop) != len(boundary.oriented):
        raise AmbiguousBoundaryError(
            f"boundary splits into several loops "
            f"({len(loop)} of {len(boundary.oriented)} edges reachable)")
    return loop


def _remove_internal(graph: MeshGraph, edges: Iterable[Edge]) -> None:
    """Drop internal edges and any vertex they leave without edges."""

    for e in edges:
        ends = e.endpoints
        graph.remove_edge(e)
        for v in ends:
            if graph.contains(v) and not v.adjacency:
                graph.remove_vertex(v)


def split_edge_at(graph: MeshGraph, e: Edge, position: Sequence[float]) -> Optional[Vertex]:
    """Insert a vertex at ``position`` in the middle of ``e``.

    The facets on either side of ``e`` are rebuilt with the new vertex in
    their loop.  Returns ``None`` if ``e`` is no longer in the graph.
    """

    if not graph.contains(e):
        logger.warning("split_edge_at: %r is stale, nothing split", e)
        return None

    p1, p2 = e.v1, e.v2
    new_v = graph.add_vertex(to_vec3(position))

    rebuilt = []
    for f in e.facets:
        loop = list(f.vertices)
        n = len(loop)
        for i in range(n):
            a, b = loop[i], loop[(i + 1) % n]
            if (a is p1 and b is p2) or (a is p2 and b is p1):
                loop.insert(i + 1, new_v)
                break
        rebuilt.append((loop, graph.is_selected(f)))
    edge_selected = graph.is_selected(e)

    graph.remove_edge(e)
    for loop, selected in rebuilt:
        f = graph.add_facet(loop)
        if selected:
            graph.set_selected(f, True)

    halves = graph.add_edge(p1, new_v), graph.add_edge(new_v, p2)
    if edge_selected:
        graph.set_selected(new_v, True)
        for half in halves:
            graph.set_selected(half, True)
    return new_v


def split_edges_at_midpoints(graph: MeshGraph, edges: Iterable[Edge]) -> List[Vertex]:
    created = []
    for e in list(edges):
        if not graph.contains(e):
            continue
        created.append(split_edge_at(graph, e, lerp(e.v1.position, e.v2.position, 0.5)))
    return created


def add_triangle(graph: MeshGraph, hint_direction: Sequence[float],
                 v0: Vertex, v1: Vertex, v2: Vertex) -> Facet:
    """Add a triangle whose winding agrees with its surroundings.

    If one of the three sides is an edge already owned by exactly one facet,
    the triangle walks that edge the other way so the surface stays
    consistently oriented.  Without such a neighbor the winding is chosen so
    the normal does not point against ``hint_direction``; this is only a
    best effort for isolated vertices.
    """

    forward = [v0, v1, v2]
    backward = [v0, v2, v1]

    for i in range(3):
        a, b = forward[i], forward[(i + 1) % 3]
        e = a.edge_connecting(b)
        if e is None or len(e.facets) != 1:
            continue
        existing_tail = e.v1 if e.f1 is not None else e.v2
        order = backward if existing_tail is a else forward
        return graph.add_facet(order)

    normal = triangle_normal(v0.position, v1.position, v2.position)
    hint = to_vec3(hint_direction)
    if normal is not None and dot(normal, hint) < 0:
        return graph.add_facet(backward)
    return graph.add_facet(forward)


def join(graph: MeshGraph, facets: Iterable[Facet]) -> Facet:
    """Merge facets into a single polygon spanning their outer boundary.

    The boundary is computed before anything is removed, so an
    :class:`AmbiguousBoundaryError` leaves the graph untouched.
    """

    fs = _live_facets(graph, facets)
    boundary = boundary_edges(fs)
    loop = boundary_loop(boundary)
    selected = any(graph.is_selected(f) for f in fs)

    for f in fs:
        graph.remove_facet(f)
    _remove_internal(graph, boundary.internal)

    merged = graph.add_facet(loop)
    if selected:
        graph.set_selected(merged, True)
    logger.debug("joined %d facets into a %d-gon", len(fs), len(loop))
    return merged


def extrude(graph: MeshGraph, facets: Iterable[Facet]) -> List[Facet]:
    """Extrude a facet set in place.

    Each source vertex gets one duplicate at the same position, the facets
    are re-emitted on the duplicates as caps, and every outer boundary edge
    ``a -> b`` gets a quad wall ``(a, b, b', a')``.  The caps become the
    selection so the caller can move them off the original surface.
    Facets that touch only at a corner give a boundary visiting that vertex
    twice; this raises :class:`AmbiguousBoundaryError` before any change.
    """

    fs = _live_facets(graph, facets)
    boundary = boundary_edges(fs)
    for v, heads in _outgoing(boundary).items():
        if len(heads) > 1:
            raise AmbiguousBoundaryError(
                f"boundary passes through {v!r} more than once")
    loops = [list(f.vertices) for f in fs]

    duplicates: Dict[Vertex, Vertex] = {}
    for loop in loops:
        for v in loop:
            if v not in duplicates:
                duplicates[v] = graph.add_vertex(v.position)

    for f in fs:
        graph.remove_facet(f)
    _remove_internal(graph, boundary.internal)

    caps = [graph.add_facet([duplicates[v] for v in loop]) for loop in loops]
    for tail, head in boundary.oriented.values():
        graph.add_facet(tail, head, duplicates[head], duplicates[tail])

    graph.deselect_all()
    for cap in caps:
        select_facet(graph, cap)
    logger.debug("extruded %d facets, %d walls", len(caps), len(boundary.oriented))
    return caps


__all__ = [
    'Boundary',
    'boundary_edges',
    'boundary_loop',
    'split_edge_at',
    'split_edges_at_midpoints',
    'add_triangle',
    'join',
    'extrude',
]
