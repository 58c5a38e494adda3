"""Flat vertex-attribute arrays for GPU upload.

The renderer owns buffer objects and shaders; this module only turns the
graph into ``float32`` record arrays it can copy as-is.  Call
:meth:`MeshBuffers.update_all` after every batch of edits.

Record layouts (one row per record):

===========  ======  ==================================================
buffer       stride  fields
===========  ======  ==================================================
vertices     5       x, y, z, vertex index, selected
edges        6       x, y, z, edge index, edge selected, endpoint selected
facets       5       x, y, z, facet index, selected
===========  ======  ==================================================

Edges emit two records (``v1`` then ``v2``); facets emit three records per
fan triangle ``(v[0], v[i+1], v[i+2])``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from cubemesh.graph import MeshGraph

VERTEX_STRIDE = 5
EDGE_STRIDE = 6
FACET_STRIDE = 5


def vertex_records(graph: MeshGraph) -> np.ndarray:
    buf = np.empty((len(graph.vertices), VERTEX_STRIDE), dtype=np.float32)
    for row, v in zip(buf, graph.vertices):
        row[0:3] = v.position
        row[3] = v.index
        row[4] = 1.0 if graph.is_selected(v) else 0.0
    return buf


def edge_records(graph: MeshGraph) -> np.ndarray:
    buf = np.empty((2 * len(graph.edges), EDGE_STRIDE), dtype=np.float32)
    for e in graph.edges:
        edge_flag = 1.0 if graph.is_selected(e) else 0.0
        for k, v in enumerate(e.endpoints):
            row = buf[2 * e.index + k]
            row[0:3] = v.position
            row[3] = e.index
            row[4] = edge_flag
            row[5] = 1.0 if graph.is_selected(v) else 0.0
    return buf


def facet_records(graph: MeshGraph) -> np.ndarray:
    buf = np.empty((3 * graph.triangles_count, FACET_STRIDE), dtype=np.float32)
    row = 0
    for f in graph.facets:
        flag = 1.0 if graph.is_selected(f) else 0.0
        for tri in f.fan():
            for v in tri:
                buf[row, 0:3] = v.position
                buf[row, 3] = f.index
                buf[row, 4] = flag
                row += 1
    return buf


@dataclass
class MeshBuffers:
    """The three record arrays of one graph, regenerated together."""

    vertices: np.ndarray = field(default_factory=lambda: np.empty((0, VERTEX_STRIDE), dtype=np.float32))
    edges: np.ndarray = field(default_factory=lambda: np.empty((0, EDGE_STRIDE), dtype=np.float32))
    facets: np.ndarray = field(default_factory=lambda: np.empty((0, FACET_STRIDE), dtype=np.float32))
    generation: int = 0

    @classmethod
    def from_graph(cls, graph: MeshGraph) -> "MeshBuffers":
        buffers = cls()
        buffers.update_all(graph)
        return buffers

    def update_all(self, graph: MeshGraph) -> None:
        self.vertices = vertex_records(graph)
        self.edges = edge_records(graph)
        self.facets = facet_records(graph)
        self.generation += 1


__all__ = [
    'VERTEX_STRIDE',
    'EDGE_STRIDE',
    'FACET_STRIDE',
    'vertex_records',
    'edge_records',
    'facet_records',
    'MeshBuffers',
]
