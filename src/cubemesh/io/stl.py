"""STL import and export for mesh graphs.

Export writes the fan triangulation of every facet.  Import merges
coincident corners into shared vertices and rebuilds triangle facets with
the same forward/reversed winding retry as the OBJ reader.
"""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from cubemesh.errors import InvalidArgumentError
from cubemesh.graph import MeshGraph
from cubemesh.vecmath import Vec3, triangle_normal

logger = logging.getLogger(__name__)

_HEADER_SIZE = 80
_STRUCT_TRIANGLE = struct.Struct('<12fH')
_VERTEX_TOL = 1e-9


@dataclass(frozen=True)
class Triangle:
    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def triangles_from_graph(graph: MeshGraph) -> Iterator[Triangle]:
    """Yield the fan triangles of every facet, skipping degenerate ones."""

    for f in graph.facets:
        for a, b, c in f.fan():
            normal = triangle_normal(a.position, b.position, c.position)
            if normal is None:
                continue
            yield Triangle(normal=normal, v0=a.position, v1=b.position, v2=c.position)


def write_stl(graph: MeshGraph, path_or_file, *, binary: bool = True, name: str = 'cubemesh') -> None:
    """Write ``graph`` to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """

    triangles = list(triangles_from_graph(graph))
    if binary:
        _write_binary(triangles, path_or_file, name)
    else:
        _write_ascii(triangles, path_or_file, name)


def _write_binary(triangles: List[Triangle], path_or_file, name: str) -> None:
    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'wb')
        close_when_done = True

    try:
        header = (name[:_HEADER_SIZE]).encode('ascii', errors='replace')
        stream.write(header.ljust(_HEADER_SIZE, b' '))
        stream.write(struct.pack('<I', len(triangles)))
        for tri in triangles:
            stream.write(_STRUCT_TRIANGLE.pack(*tri.normal, *tri.v0, *tri.v1, *tri.v2, 0))
    finally:
        if close_when_done:
            stream.close()


def _write_ascii(triangles: List[Triangle], path_or_file, name: str) -> None:
    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'w', encoding='ascii')
        close_when_done = True

    try:
        print(f"solid {name}", file=stream)
        for tri in triangles:
            n = tri.normal
            print(f"  facet normal {n[0]:.6e} {n[1]:.6e} {n[2]:.6e}", file=stream)
            print("    outer loop", file=stream)
            for v in (tri.v0, tri.v1, tri.v2):
                print(f"      vertex {v[0]:.6e} {v[1]:.6e} {v[2]:.6e}", file=stream)
            print("    endloop", file=stream)
            print("  endfacet", file=stream)
        print(f"endsolid {name}", file=stream)
    finally:
        if close_when_done:
            stream.close()


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------


def _is_binary_stl(data: bytes) -> bool:
    """Binary STL is an 80-byte header, a 4-byte count, then 50 bytes per
    triangle.  ASCII STL starts with ``solid``, but so do some binary
    headers, so the size is checked as well."""

    if len(data) < 84:
        return False
    header = data[:80].decode('ascii', errors='ignore').strip().lower()
    if not header.startswith('solid'):
        return True
    tri_count = struct.unpack('<I', data[80:84])[0]
    if len(data) != 84 + tri_count * 50:
        return False
    rest = data[84:min(200, len(data))]
    return not (b'facet' in rest or b'vertex' in rest)


def _parse_binary_stl(data: bytes) -> List[Triangle]:
    tri_count = struct.unpack('<I', data[80:84])[0]
    end = 84 + tri_count * _STRUCT_TRIANGLE.size
    if len(data) < end:
        raise InvalidArgumentError(
            f"binary STL declares {tri_count} triangles but holds only "
            f"{(len(data) - 84) // _STRUCT_TRIANGLE.size}")
    return [Triangle(normal=values[0:3], v0=values[3:6], v1=values[6:9], v2=values[9:12])
            for values in _STRUCT_TRIANGLE.iter_unpack(data[84:end])]


_NUM = r'([eE\d.+-]+)'
_FACET_PATTERN = re.compile(
    rf'facet\s+normal\s+{_NUM}\s+{_NUM}\s+{_NUM}\s+'
    r'outer\s+loop\s+'
    rf'vertex\s+{_NUM}\s+{_NUM}\s+{_NUM}\s+'
    rf'vertex\s+{_NUM}\s+{_NUM}\s+{_NUM}\s+'
    rf'vertex\s+{_NUM}\s+{_NUM}\s+{_NUM}\s+'
    r'endloop\s+endfacet',
    re.IGNORECASE,
)


def _parse_ascii_stl(text: str) -> List[Triangle]:
    triangles = []
    for match in _FACET_PATTERN.finditer(text):
        g = [float(x) for x in match.groups()]
        triangles.append(Triangle(normal=tuple(g[0:3]), v0=tuple(g[3:6]),
                                  v1=tuple(g[6:9]), v2=tuple(g[9:12])))
    return triangles


def _vertex_key(v: Vec3, tol: float = _VERTEX_TOL) -> Tuple[int, int, int]:
    s = 1.0 / tol
    return int(round(v[0] * s)), int(round(v[1] * s)), int(round(v[2] * s))


def read_stl(path_or_file) -> MeshGraph:
    """Read an STL file into a new :class:`MeshGraph`.

    Coincident corners become one vertex.  Triangles that collapse after
    merging, or that cannot be added in either winding, are skipped with a
    warning.
    """

    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
        if isinstance(data, str):
            data = data.encode('utf-8')
    else:
        with open(path_or_file, 'rb') as f:
            data = f.read()

    if _is_binary_stl(data):
        triangles = _parse_binary_stl(data)
    else:
        triangles = _parse_ascii_stl(data.decode('utf-8', errors='replace'))

    graph = MeshGraph()
    vertex_map: Dict[Tuple[int, int, int], object] = {}
    skipped = 0
    for tri in triangles:
        loop = []
        for p in (tri.v0, tri.v1, tri.v2):
            key = _vertex_key(p)
            if key not in vertex_map:
                vertex_map[key] = graph.add_vertex(p)
            loop.append(vertex_map[key])
        if len(set(loop)) < 3:
            skipped += 1
            continue
        if graph.can_add_facet(loop):
            graph.add_facet(loop)
        elif graph.can_add_facet(loop[::-1]):
            graph.add_facet(loop[::-1])
        else:
            skipped += 1

    if skipped:
        logger.warning("%d STL triangles skipped (degenerate or non-manifold)", skipped)
    return graph


__all__ = ['Triangle', 'triangles_from_graph', 'write_stl', 'read_stl']
