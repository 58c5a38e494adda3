import pytest

from cubemesh.commands import COMMANDS, EditorSession, find_command, groups
from cubemesh.errors import AmbiguousBoundaryError, InvalidArgumentError
from cubemesh.factory import BoxMeshFactory
from cubemesh.graph import MeshGraph
from cubemesh.validation import check_invariants


def _quad_session():
    graph = MeshGraph()
    vs = graph.extend([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])
    graph.add_facet(vs)
    return EditorSession(graph), vs


def test_command_table():
    keys = [c.key for c in COMMANDS]
    assert len(keys) == len(set(keys))
    assert list(groups()) == ['Edit', 'Selection', 'Create']
    assert find_command('edit/join').key == 'Edit/Join'
    with pytest.raises(KeyError):
        find_command('Edit/Bevel')


def test_create_cube_selects_it_and_refreshes_buffers():
    session = EditorSession()
    generation = session.buffers.generation

    session.run('Create/Cube')

    assert len(session.graph.vertices) == 8
    assert len(session.graph.selected_facets) == 6
    assert len(session.buffers.vertices) == 8
    assert len(session.buffers.facets) == 36
    assert session.buffers.generation == generation + 1


def test_create_vertex():
    session = EditorSession()
    session.run('Create/Vertex')
    v = session.graph.vertices[0]
    assert v.position == (0.0, 0.0, 0.0)
    assert list(session.graph.selected_vertices) == [v]


def test_connect_two_vertices_splits_facet():
    session, vs = _quad_session()
    session.graph.set_selected(vs[0], True)
    session.graph.set_selected(vs[2], True)

    session.run('Edit/Connect')

    assert len(session.graph.facets) == 2
    assert vs[0].edge_connecting(vs[2]) is not None
    assert check_invariants(session.graph)


def test_connect_three_vertices_adds_triangle():
    session = EditorSession()
    graph = session.graph
    vs = graph.extend([(0, 0, 0), (0, 1, 0), (1, 0, 0)])
    for v in vs:
        graph.set_selected(v, True)

    session.run('Edit/Connect')

    assert len(graph.facets) == 1
    # winding follows the default +z view direction
    assert graph.facets[0].vertices == [vs[0], vs[2], vs[1]]


def test_failed_command_restores_snapshot():
    session, vs = _quad_session()
    session.graph.set_selected(vs[0], True)
    before = session.graph

    with pytest.raises(InvalidArgumentError):
        session.run('Edit/Connect')

    assert session.graph is not before
    assert len(session.graph.facets) == 1
    assert session.graph.is_selected(session.graph.vertices[0])


def test_failed_command_without_atomic_keeps_graph():
    session = EditorSession(BoxMeshFactory().generate())
    before = session.graph
    session.run('Selection/Select All')

    with pytest.raises(AmbiguousBoundaryError):
        session.run('Edit/Join', atomic=False)

    assert session.graph is before
    assert len(before.facets) == 6


def test_delete_commands():
    session = EditorSession(BoxMeshFactory().generate())
    graph = session.graph
    graph.set_selected(graph.facets[0], True)
    session.run('Edit/Delete Facets')
    assert len(graph.facets) == 5
    assert len(graph.edges) == 12

    graph.set_selected(graph.edges[0], True)
    session.run('Edit/Delete Edges')
    assert len(graph.edges) == 11

    graph.set_selected(graph.vertices[0], True)
    session.run('Edit/Delete Vertices')
    assert len(graph.vertices) == 7
    assert check_invariants(graph)


def test_join_and_extrude_commands():
    session = EditorSession()
    session.run('Create/Plane')
    graph = session.graph
    assert len(graph.facets) == 100

    session.run('Edit/Join')
    assert len(graph.facets) == 1
    assert len(graph.facets[0]) == 40

    session.run('Edit/Extrude')
    assert len(graph.facets) == 1 + 40
    assert check_invariants(graph)


def test_split_edges_command():
    session, vs = _quad_session()
    graph = session.graph
    graph.set_selected(vs[0].edge_connecting(vs[1]), True)

    session.run('Edit/Split Edges')

    assert len(graph.vertices) == 5
    assert graph.vertices[4].position == (0.5, 0.0, 0.0)
    assert len(graph.facets[0]) == 5


def test_selection_commands():
    session, vs = _quad_session()
    session.run('Selection/Select All')
    assert len(session.graph.selected_edges) == 4

    session.run('Selection/Deselect All')
    assert len(session.graph.selected_vertices) == 0

    session.graph.set_selected(vs[0], True)
    session.run('Selection/Select Neighbours')
    assert set(session.graph.selected_vertices) == {vs[0], vs[1], vs[3]}


def test_non_graph_error_also_restores_snapshot():
    session, vs = _quad_session()
    session.graph.set_selected(vs[0], True)
    session.config.factories['cube'] = {'bogus': 1}

    with pytest.raises(TypeError):
        session.run('Create/Cube')

    assert len(session.graph.selected_vertices) == 1
    assert len(session.graph.vertices) == 4
