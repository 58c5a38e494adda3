import io

import pytest

from cubemesh.errors import InvalidArgumentError, ObjFormatError, SlotOccupiedError
from cubemesh.factory import BoxMeshFactory
from cubemesh.graph import MeshGraph
from cubemesh.io.obj import dumps, loads, read_obj, write_obj
from cubemesh.validation import check_invariants, is_closed


QUAD_OBJ = """\
# unit quad
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
vn 0 0 1
f 1//1 2//1 3//1 4//1
"""


def test_read_quad():
    graph = loads(QUAD_OBJ)
    assert len(graph.vertices) == 4
    assert len(graph.facets) == 1
    assert [v.index for v in graph.facets[0].vertices] == [0, 1, 2, 3]
    assert graph.vertices[2].position == (1.0, 1.0, 0.0)


def test_read_negative_indices_and_texture_refs():
    text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nvt 0 0\nf -3/1 -2/1 -1/1\n"
    graph = loads(text)
    assert [v.index for v in graph.facets[0].vertices] == [0, 1, 2]


def test_inconsistent_winding_is_reversed():
    text = ("v 0 0 0\nv 1 0 0\nv 0 1 0\nv 1 1 0\n"
            "f 1 2 3\n"
            "f 2 3 4\n")
    graph = loads(text)
    assert len(graph.facets) == 2
    assert [v.index for v in graph.facets[1].vertices] == [3, 2, 1]
    assert check_invariants(graph)


def test_non_manifold_face_strict_raises():
    text = ("v 0 0 0\nv 1 0 0\nv 0 1 0\nv 0 -1 0\nv 0 0 1\n"
            "f 1 2 3\n"
            "f 2 1 4\n"
            "f 1 2 5\n")
    with pytest.raises(SlotOccupiedError):
        loads(text)


def test_non_manifold_face_lenient_skips():
    text = ("v 0 0 0\nv 1 0 0\nv 0 1 0\nv 0 -1 0\nv 0 0 1\n"
            "f 1 2 3\n"
            "f 2 1 4\n"
            "f 1 2 5\n")
    graph = loads(text, strict=False)
    assert len(graph.facets) == 2
    assert check_invariants(graph)


@pytest.mark.parametrize('text', [
    "v 0 0\n",
    "v a b c\n",
    "v 0 0 0\nv 1 0 0\nf 1 2\n",
    "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 4\n",
    "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 x 3\n",
    "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 2\n",
])
def test_malformed_input(text):
    with pytest.raises(ObjFormatError):
        loads(text)


def test_format_error_reports_line_number():
    with pytest.raises(InvalidArgumentError) as excinfo:
        loads("# comment\nv 0 0 0\nv 1 zero 0\n")
    assert excinfo.value.lineno == 3
    assert str(excinfo.value).startswith('line 3:')


def test_write_obj_format():
    graph = MeshGraph()
    a, b, c = graph.extend([(0, 0, 0), (1.5, 0, 0), (0, 2, 0)])
    graph.add_facet(a, b, c)

    text = dumps(graph, precision=2)
    lines = text.splitlines()
    assert lines[0] == '# 3 vertices, 1 facets'
    assert lines[1:] == [
        'v 0.00 0.00 0.00',
        'v 1.50 0.00 0.00',
        'v 0.00 2.00 0.00',
        'f 1 2 3',
    ]


def test_box_roundtrip_through_file(tmp_path):
    graph = BoxMeshFactory(length=2, width=3, height=4).generate()
    path = tmp_path / 'box.obj'
    write_obj(graph, path)

    loaded = read_obj(path)
    assert len(loaded.vertices) == 8
    assert len(loaded.edges) == 12
    assert len(loaded.facets) == 6
    assert is_closed(loaded)
    for f, g in zip(graph.facets, loaded.facets):
        assert [v.index for v in f.vertices] == [v.index for v in g.vertices]
    for v, w in zip(graph.vertices, loaded.vertices):
        assert v.position == pytest.approx(w.position)


def test_read_from_stream():
    graph = read_obj(io.StringIO(QUAD_OBJ))
    assert len(graph.facets) == 1
