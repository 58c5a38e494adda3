"""Structural checks for mesh graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from cubemesh.entities import Edge
from cubemesh.graph import MeshGraph


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def check_invariants(graph: MeshGraph) -> CheckResult:
    """Verify index, adjacency, facet-slot and selection invariants.

    Every violation found is reported, not just the first.
    """

    warnings: List[str] = []

    for name, collection in (('vertex', graph.vertices),
                             ('edge', graph.edges),
                             ('facet', graph.facets)):
        for i, entity in enumerate(collection):
            if entity.index != i:
                warnings.append(f'{name} at position {i} stores index {entity.index}')

    live_edges = set(graph.edges)
    for e in graph.edges:
        if e.v1.adjacency.get(e.v2) is not e or e.v2.adjacency.get(e.v1) is not e:
            warnings.append(f'edge {e.index} missing from endpoint adjacency')
        for f in e.facets:
            if not graph.contains(f):
                warnings.append(f'edge {e.index} references removed facet')

    for v in graph.vertices:
        for other, e in v.adjacency.items():
            if e not in live_edges:
                warnings.append(f'vertex {v.index} adjacency holds removed edge')
            elif other.adjacency.get(v) is not e:
                warnings.append(f'vertex {v.index} adjacency is one-sided')

    triangles = 0
    for f in graph.facets:
        triangles += f.triangles_count
        if len(f.vertices) < 3:
            warnings.append(f'facet {f.index} has {len(f.vertices)} vertices')
            continue
        for tail, head in f.oriented_pairs():
            e = tail.edge_connecting(head)
            if e is None:
                warnings.append(f'facet {f.index} has no edge {tail.index}-{head.index}')
                continue
            slot = e.f1 if e.v1 is tail else e.f2
            if slot is not f:
                warnings.append(f'facet {f.index} not in slot of edge {e.index}')
    if triangles != graph.triangles_count:
        warnings.append(f'triangle counter {graph.triangles_count} != {triangles}')

    for label, selection in (('vertex', graph.selected_vertices),
                             ('edge', graph.selected_edges),
                             ('facet', graph.selected_facets)):
        for entity in selection:
            if not graph.contains(entity):
                warnings.append(f'selected {label} is not in the graph')

    return CheckResult(not warnings, warnings)


def boundary_edge_list(graph: MeshGraph) -> List[Edge]:
    """Edges with at least one empty facet slot."""

    return [e for e in graph.edges if e.is_boundary]


def is_closed(graph: MeshGraph) -> CheckResult:
    """Whether every edge has a facet on both sides."""

    boundary = boundary_edge_list(graph)
    free = [e for e in boundary if e.is_free]
    warnings: List[str] = []
    if boundary:
        warnings.append(f'{len(boundary)} boundary edges detected')
    if free:
        warnings.append(f'{len(free)} edges without any facet')
    return CheckResult(not boundary, warnings)


__all__ = ['CheckResult', 'check_invariants', 'boundary_edge_list', 'is_closed']
