import pytest

from pregelframe.graphframe import EDGE_DST, EDGE_SRC, VERTEX_ID, GraphFrame

NAMES = ["Hub", "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry", "Ivy"]
SRC = [1, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 4, 4, 4, 5, 5, 5, 6, 6, 7, 7, 8, 8, 9, 10]
DST = [2, 3, 4, 5, 6, 7, 8, 9, 10, 3, 4, 5, 6, 4, 5, 6, 5, 6, 7, 6, 7, 8, 7, 8, 8, 9, 9, 10, 10, 1]


@pytest.fixture
def graph():
    vertices = [{"id": i, "name": name} for i, name in zip(range(1, 11), NAMES)]
    edges = [{"src": s, "dst": d} for s, d in zip(SRC, DST)]
    return GraphFrame(vertices, edges)


def _as_map(rows, column):
    return {row[VERTEX_ID]: row[column] for row in rows}


def test_num_nodes(graph):
    assert graph.num_nodes() == 10


def test_num_edges(graph):
    assert graph.num_edges() == 30


def test_in_degrees(graph):
    degrees = _as_map(graph.in_degrees(), "in_degree")
    assert degrees == {1: 1, 2: 1, 3: 2, 4: 3, 5: 4, 6: 5, 7: 4, 8: 4, 9: 3, 10: 3}


def test_out_degrees(graph):
    degrees = _as_map(graph.out_degrees(), "out_degree")
    assert degrees == {1: 9, 2: 4, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 2, 9: 1, 10: 1}


def test_degree_rows_have_exactly_two_columns(graph):
    for row in graph.in_degrees():
        assert set(row) == {VERTEX_ID, "in_degree"}
    for row in graph.out_degrees():
        assert set(row) == {VERTEX_ID, "out_degree"}


def test_degree_totals_match_edge_count(graph):
    assert sum(row["in_degree"] for row in graph.in_degrees()) == graph.num_edges()
    assert sum(row["out_degree"] for row in graph.out_degrees()) == graph.num_edges()


def test_empty_graph():
    empty = GraphFrame([], [])
    assert empty.num_nodes() == 0
    assert empty.num_edges() == 0
    assert empty.in_degrees() == []
    assert empty.out_degrees() == []


def test_null_endpoint_is_not_counted():
    graph = GraphFrame([{"id": 1}, {"id": 2}], [{EDGE_SRC: None, EDGE_DST: 2}])
    assert graph.in_degrees() == [{VERTEX_ID: 2, "in_degree": 0}]


def test_missing_edge_column_raises():
    graph = GraphFrame([{"id": 1}], [{EDGE_SRC: 1}])
    with pytest.raises(KeyError):
        graph.in_degrees()


def test_input_rows_are_copied():
    edges = [{"src": 1, "dst": 2}]
    graph = GraphFrame([{"id": 1}, {"id": 2}], edges)
    edges.append({"src": 2, "dst": 1})
    edges[0]["dst"] = 1
    assert graph.num_edges() == 1
    assert graph.edges[0]["dst"] == 2