"""Wavefront OBJ import and export for mesh graphs.

Only geometry and polygon connectivity are handled: ``v`` and ``f``
records.  Texture coordinates, normals, groups and materials are skipped.
"""

from __future__ import annotations

import io
import logging
from typing import List

from cubemesh.errors import ObjFormatError
from cubemesh.graph import MeshGraph

logger = logging.getLogger(__name__)


def _open_text(path_or_file, mode: str):
    if hasattr(path_or_file, 'read' if mode == 'r' else 'write'):
        return path_or_file, False
    return open(path_or_file, mode, encoding='utf-8'), True


def _parse_vertex(fields: List[str], lineno: int):
    if len(fields) < 3:
        raise ObjFormatError("vertex needs at least x y z", lineno)
    try:
        return float(fields[0]), float(fields[1]), float(fields[2])
    except ValueError:
        raise ObjFormatError(f"bad vertex coordinates {' '.join(fields)!r}", lineno) from None


def _parse_face(fields: List[str], vertex_count: int, lineno: int) -> List[int]:
    indices = []
    for token in fields:
        head = token.split('/', 1)[0]
        try:
            i = int(head)
        except ValueError:
            raise ObjFormatError(f"bad face index {token!r}", lineno) from None
        if i < 0:
            i = vertex_count + i
        else:
            i -= 1
        if not 0 <= i < vertex_count:
            raise ObjFormatError(f"face index {token!r} out of range", lineno)
        indices.append(i)
    if len(indices) < 3:
        raise ObjFormatError("face needs at least 3 vertices", lineno)
    return indices


def read_obj(path_or_file, *, strict: bool = True) -> MeshGraph:
    """Read an OBJ file into a new :class:`MeshGraph`.

    Each face is added with its stored winding when the edge slots allow it
    and reversed otherwise.  When neither fits, ``strict`` decides between
    raising :class:`~cubemesh.errors.SlotOccupiedError` and skipping the face with a
    warning.
    """

    stream, close_when_done = _open_text(path_or_file, 'r')
    graph = MeshGraph()
    skipped = 0
    try:
        for lineno, raw in enumerate(stream, start=1):
            line = raw.split('#', 1)[0].strip()
            if not line:
                continue
            keyword, *fields = line.split()
            if keyword == 'v':
                graph.add_vertex(_parse_vertex(fields, lineno))
            elif keyword == 'f':
                indices = _parse_face(fields, len(graph.vertices), lineno)
                loop = [graph.vertices[i] for i in indices]
                if len(set(loop)) != len(loop):
                    raise ObjFormatError("face repeats a vertex", lineno)
                if graph.can_add_facet(loop):
                    graph.add_facet(loop)
                elif graph.can_add_facet(loop[::-1]):
                    logger.debug("line %d: face added with reversed winding", lineno)
                    graph.add_facet(loop[::-1])
                elif strict:
                    # raises with the conflicting edge
                    graph.add_facet(loop)
                else:
                    skipped += 1
                    logger.warning("line %d: non-manifold face skipped", lineno)
    finally:
        if close_when_done:
            stream.close()

    if skipped:
        logger.warning("%d faces skipped while reading OBJ", skipped)
    return graph


def write_obj(graph: MeshGraph, path_or_file, *, precision: int = 6) -> None:
    """Write ``graph`` as OBJ ``v`` and ``f`` records in index order."""

    stream, close_when_done = _open_text(path_or_file, 'w')
    try:
        print(f"# {len(graph.vertices)} vertices, {len(graph.facets)} facets", file=stream)
        for v in graph.vertices:
            x, y, z = v.position
            print(f"v {x:.{precision}f} {y:.{precision}f} {z:.{precision}f}", file=stream)
        for f in graph.facets:
            print("f " + " ".join(str(v.index + 1) for v in f.vertices), file=stream)
    finally:
        if close_when_done:
            stream.close()


def loads(text: str, *, strict: bool = True) -> MeshGraph:
    return read_obj(io.StringIO(text), strict=strict)


def dumps(graph: MeshGraph, *, precision: int = 6) -> str:
    buf = io.StringIO()
    write_obj(graph, buf, precision=precision)
    return buf.getvalue()


__all__ = ['read_obj', 'write_obj', 'loads', 'dumps']
