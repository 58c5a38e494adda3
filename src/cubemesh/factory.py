"""Parametric primitives built directly on a :class:`MeshGraph`.

Every factory adds its primitive to an existing graph (``add_to``) or
produces a new one (``generate``).  All closed primitives are consistently
wound with outward normals, so every edge ends up with both facet slots
occupied.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Type

from cubemesh.entities import Vertex
from cubemesh.graph import MeshGraph
from cubemesh.selection import select_adjacency


class MeshFactory(ABC):

    @abstractmethod
    def build(self, graph: MeshGraph) -> List[Vertex]:
        """Add the primitive to ``graph`` and return its vertices."""

    def add_to(self, graph: MeshGraph, selected: bool = True) -> List[Vertex]:
        vertices = self.build(graph)
        if selected:
            for v in vertices:
                select_adjacency(graph, v)
        return vertices

    def generate(self) -> MeshGraph:
        graph = MeshGraph()
        self.add_to(graph, selected=False)
        return graph


@dataclass
class BoxMeshFactory(MeshFactory):
    """Axis aligned box: 8 vertices, 6 quads."""

    length: float = 2.0
    width: float = 2.0
    height: float = 2.0

    def build(self, graph: MeshGraph) -> List[Vertex]:
        l, w, h = self.length / 2, self.width / 2, self.height / 2
        vs = [
            graph.add_vertex(l, h, w),
            graph.add_vertex(l, h, -w),
            graph.add_vertex(l, -h, w),
            graph.add_vertex(l, -h, -w),
            graph.add_vertex(-l, h, w),
            graph.add_vertex(-l, h, -w),
            graph.add_vertex(-l, -h, w),
            graph.add_vertex(-l, -h, -w),
        ]
        graph.add_facet(vs[2], vs[3], vs[1], vs[0])
        graph.add_facet(vs[4], vs[5], vs[7], vs[6])
        graph.add_facet(vs[1], vs[5], vs[4], vs[0])
        graph.add_facet(vs[2], vs[6], vs[7], vs[3])
        graph.add_facet(vs[0], vs[4], vs[6], vs[2])
        graph.add_facet(vs[3], vs[7], vs[5], vs[1])
        return vs


@dataclass
class ArrowFactory(MeshFactory):
    """Shaft edge along +z capped by an open four sided head."""

    length: float = 3.0
    head_size: float = 0.5

    def build(self, graph: MeshGraph) -> List[Vertex]:
        s = self.head_size / 8
        base = self.length - self.head_size
        origin = graph.add_vertex(0, 0, 0)
        tip = graph.add_vertex(0, 0, self.length)
        ring = [
            graph.add_vertex(s, s, base),
            graph.add_vertex(-s, s, base),
            graph.add_vertex(-s, -s, base),
            graph.add_vertex(s, -s, base),
        ]
        graph.add_edge(origin, tip)
        for i in range(4):
            graph.add_facet(ring[i], ring[(i + 1) % 4], tip)
        return [origin, tip] + ring


@dataclass
class UVSphereFactory(MeshFactory):
    """Latitude/longitude sphere with triangle fans at the poles."""

    radius: float = 2.0
    u_subdivision: int = 32
    v_subdivision: int = 16

    def build(self, graph: MeshGraph) -> List[Vertex]:
        nu, nv = self.u_subdivision, self.v_subdivision
        rings = []
        for v in range(1, nv):
            b = -math.pi * v / nv + math.pi / 2
            row = []
            for u in range(nu):
                a = math.pi * 2 * u / nu
                row.append(graph.add_vertex(
                    self.radius * math.cos(a) * math.cos(b),
                    self.radius * math.sin(b),
                    -self.radius * math.sin(a) * math.cos(b)))
            rings.append(row)

        for v in range(nv - 2):
            for u in range(nu):
                graph.add_facet(rings[v][u], rings[v + 1][u],
                                rings[v + 1][(u + 1) % nu], rings[v][(u + 1) % nu])

        top = graph.add_vertex(0, self.radius, 0)
        bottom = graph.add_vertex(0, -self.radius, 0)
        last = rings[-1]
        for u in range(nu):
            graph.add_facet(top, rings[0][u], rings[0][(u + 1) % nu])
            graph.add_facet(last[(u + 1) % nu], last[u], bottom)

        return [v for row in rings for v in row] + [top, bottom]


@dataclass
class PlaneFactory(MeshFactory):
    """Square grid of quads in the XZ plane."""

    size: float = 2.0
    u_subdivision: int = 10
    v_subdivision: int = 10

    def build(self, graph: MeshGraph) -> List[Vertex]:
        nu, nv = self.u_subdivision, self.v_subdivision
        grid = [[graph.add_vertex(self.size * j / nu - self.size / 2,
                                  0,
                                  -self.size * i / nv + self.size / 2)
                 for j in range(nu + 1)]
                for i in range(nv + 1)]
        for i in range(nv):
            for j in range(nu):
                graph.add_facet(grid[i][j], grid[i][j + 1],
                                grid[i + 1][j + 1], grid[i + 1][j])
        return [v for row in grid for v in row]


@dataclass
class CylinderFactory(MeshFactory):
    """Closed cylinder along y with n-gon caps."""

    height: float = 2.0
    radius: float = 1.0
    subdivision: int = 32

    def build(self, graph: MeshGraph) -> List[Vertex]:
        n = self.subdivision
        top, bottom = [], []
        for i in range(n):
            a = math.pi * 2 * i / n
            x, z = self.radius * math.cos(a), -self.radius * math.sin(a)
            top.append(graph.add_vertex(x, self.height / 2, z))
            bottom.append(graph.add_vertex(x, -self.height / 2, z))

        graph.add_facet(top)
        graph.add_facet(list(reversed(bottom)))
        for i in range(n):
            graph.add_facet(top[i], bottom[i], bottom[(i + 1) % n], top[(i + 1) % n])
        return top + bottom


FACTORIES: Dict[str, Type[MeshFactory]] = {
    'box': BoxMeshFactory,
    'cube': BoxMeshFactory,
    'arrow': ArrowFactory,
    'sphere': UVSphereFactory,
    'plane': PlaneFactory,
    'cylinder': CylinderFactory,
}


def make_factory(kind: str, **params) -> MeshFactory:
    try:
        cls = FACTORIES[kind.lower()]
    except KeyError:
        raise ValueError(f"unknown primitive {kind!r}; expected one of "
                         f"{', '.join(sorted(FACTORIES))}") from None
    return cls(**params)


__all__ = [
    'MeshFactory',
    'BoxMeshFactory',
    'ArrowFactory',
    'UVSphereFactory',
    'PlaneFactory',
    'CylinderFactory',
    'FACTORIES',
    'make_factory',
]
