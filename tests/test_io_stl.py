import io
import struct

import pytest

from cubemesh.errors import InvalidArgumentError
from cubemesh.factory import BoxMeshFactory
from cubemesh.graph import MeshGraph
from cubemesh.io.stl import read_stl, triangles_from_graph, write_stl
from cubemesh.validation import check_invariants, is_closed


def _make_quad():
    graph = MeshGraph()
    vs = graph.extend([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])
    graph.add_facet(vs)
    return graph


def test_triangles_from_graph_fans_polygons():
    tris = list(triangles_from_graph(_make_quad()))
    assert len(tris) == 2
    for tri in tris:
        assert tri.normal == (0.0, 0.0, 1.0)


def test_degenerate_fan_triangles_are_skipped():
    graph = MeshGraph()
    vs = graph.extend([(0, 0, 0), (1, 0, 0), (2, 0, 0), (1, 1, 0)])
    graph.add_facet(vs)
    assert len(list(triangles_from_graph(graph))) == 1


def test_write_stl_binary(tmp_path):
    path = tmp_path / 'quad.stl'
    write_stl(_make_quad(), path, binary=True, name='test')

    data = path.read_bytes()
    assert len(data) == 80 + 4 + 2 * 50
    assert data[0:4] == b'test'
    count = struct.unpack('<I', data[80:84])[0]
    assert count == 2


def test_write_stl_ascii():
    buf = io.StringIO()
    write_stl(_make_quad(), buf, binary=False, name='ascii_test')

    text = buf.getvalue()
    assert 'solid ascii_test' in text
    assert text.count('facet normal') == 2
    assert text.count('vertex') == 6
    assert text.strip().endswith('endsolid ascii_test')


# ---------------------------------------------------------------------------
# STL Import Tests
# ---------------------------------------------------------------------------


def test_read_stl_binary_roundtrip(tmp_path):
    box = BoxMeshFactory(length=2, width=2, height=2).generate()
    path = tmp_path / 'box.stl'
    write_stl(box, path, binary=True)

    imported = read_stl(path)
    assert len(imported.vertices) == 8
    assert len(imported.facets) == 12
    assert len(imported.edges) == 18
    assert is_closed(imported)
    assert check_invariants(imported)


def test_read_stl_ascii_roundtrip(tmp_path):
    box = BoxMeshFactory().generate()
    path = tmp_path / 'box_ascii.stl'
    write_stl(box, path, binary=False)

    imported = read_stl(path)
    assert len(imported.vertices) == 8
    assert imported.triangles_count == 12
    assert is_closed(imported)


def test_read_stl_from_stream():
    buf = io.BytesIO()
    write_stl(_make_quad(), buf, binary=True)
    buf.seek(0)

    imported = read_stl(buf)
    assert len(imported.vertices) == 4
    assert len(imported.facets) == 2


def test_read_stl_skips_collapsed_triangles():
    text = """solid bad
  facet normal 0 0 1
    outer loop
      vertex 0 0 0
      vertex 1 0 0
      vertex 0 1 0
    endloop
  endfacet
  facet normal 0 0 1
    outer loop
      vertex 0 0 0
      vertex 0 0 0
      vertex 1 0 0
    endloop
  endfacet
endsolid bad
"""
    imported = read_stl(io.StringIO(text))
    assert len(imported.facets) == 1
    assert len(imported.vertices) == 3


def test_read_stl_truncated_binary_raises():
    buf = io.BytesIO()
    write_stl(_make_quad(), buf, binary=True)
    data = buf.getvalue()[:-10]

    with pytest.raises(InvalidArgumentError):
        read_stl(io.BytesIO(data))
