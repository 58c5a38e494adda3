"""Conversion between mesh graphs and ``trimesh.Trimesh``.

Optional: requires the ``trimesh`` package (``pip install cubemesh[trimesh]``).
Useful for running trimesh's own diagnostics (watertightness, volume,
Euler number) on an edited graph.
"""

from __future__ import annotations

import logging

import numpy as np

try:
    import trimesh
except ImportError:  # pragma: no cover - optional dependency
    trimesh = None  # type: ignore[assignment]

from cubemesh.graph import MeshGraph

logger = logging.getLogger(__name__)


def is_available() -> bool:
    return trimesh is not None


def to_trimesh(graph: MeshGraph) -> "trimesh.Trimesh":
    """Fan-triangulate every facet into a ``Trimesh`` sharing vertex order."""

    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed")

    verts = np.asarray([v.position for v in graph.vertices], dtype=float).reshape(-1, 3)
    faces = np.asarray([[a.index, b.index, c.index]
                        for f in graph.facets for a, b, c in f.fan()],
                       dtype=np.int64).reshape(-1, 3)
    return trimesh.Trimesh(vertices=verts, faces=faces, process=False)


def from_trimesh(mesh: "trimesh.Trimesh") -> MeshGraph:
    """Build a graph with one triangle facet per mesh face.

    Faces that cannot be added in either winding are skipped with a
    warning.
    """

    graph = MeshGraph()
    vs = [graph.add_vertex(tuple(float(c) for c in p)) for p in np.asarray(mesh.vertices)]
    skipped = 0
    for face in np.asarray(mesh.faces):
        loop = [vs[int(i)] for i in face]
        if len(set(loop)) < 3:
            skipped += 1
        elif graph.can_add_facet(loop):
            graph.add_facet(loop)
        elif graph.can_add_facet(loop[::-1]):
            graph.add_facet(loop[::-1])
        else:
            skipped += 1
    if skipped:
        logger.warning("%d trimesh faces skipped (degenerate or non-manifold)", skipped)
    return graph


__all__ = ['is_available', 'to_trimesh', 'from_trimesh']
