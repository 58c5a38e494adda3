from cubemesh.factory import BoxMeshFactory, PlaneFactory
from cubemesh.graph import MeshGraph
from cubemesh.selection import (
    SelectionSet,
    select_adjacency,
    select_all,
    select_edge,
    select_facet,
    select_neighbours,
)


def test_selection_set_keeps_insertion_order():
    s = SelectionSet()
    assert s.first() is None
    assert s.last() is None
    s.add('b')
    s.add('a')
    s.add('b')
    assert list(s) == ['b', 'a']
    assert len(s) == 2
    assert s.first() == 'b'
    assert s.last() == 'a'
    s.discard('b')
    s.discard('missing')
    assert list(s) == ['a']
    s.clear()
    assert len(s) == 0


def test_select_edge_includes_endpoints():
    graph = MeshGraph()
    a = graph.add_vertex(0, 0, 0)
    b = graph.add_vertex(1, 0, 0)
    e = graph.add_edge(a, b)
    select_edge(graph, e)
    assert graph.is_selected(e)
    assert graph.is_selected(a) and graph.is_selected(b)


def test_select_facet_includes_edges_and_vertices():
    graph = BoxMeshFactory().generate()
    f = graph.facets[0]
    select_facet(graph, f)

    assert list(graph.selected_facets) == [f]
    assert set(graph.selected_edges) == set(f.edges)
    assert set(graph.selected_vertices) == set(f.vertices)


def test_select_adjacency():
    graph = BoxMeshFactory().generate()
    v = graph.vertices[0]
    select_adjacency(graph, v)

    assert list(graph.selected_vertices) == [v]
    assert len(graph.selected_edges) == 3
    assert len(graph.selected_facets) == 3


def test_select_all_and_deselect_all():
    graph = BoxMeshFactory().generate()
    select_all(graph)
    assert len(graph.selected_vertices) == 8
    assert len(graph.selected_edges) == 12
    assert len(graph.selected_facets) == 6

    graph.deselect_all()
    assert len(graph.selected_vertices) == 0
    assert len(graph.selected_edges) == 0
    assert len(graph.selected_facets) == 0


def test_select_neighbours_grows_one_ring():
    graph = PlaneFactory(size=4, u_subdivision=4, v_subdivision=4).generate()
    centre = graph.vertices[12]
    graph.set_selected(centre, True)

    select_neighbours(graph)

    assert len(graph.selected_vertices) == 5
    assert len(graph.selected_edges) == 4
    assert len(graph.selected_facets) == 0

    select_neighbours(graph)
    # the 3x3 block around the centre plus its outer ring of 4
    assert len(graph.selected_vertices) == 13
    assert len(graph.selected_facets) == 4
