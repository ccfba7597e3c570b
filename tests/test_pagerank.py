import pytest

from pregelframe.graphframe import GraphFrame
from pregelframe.pagerank import PAGERANK, PageRankBuilder, pagerank


def make_graph(vertices, edges):
    return GraphFrame(
        vertices=[{"id": v} for v in vertices],
        edges=[{"src": s, "dst": d} for s, d in edges],
    )


def hub_graph():
    src = [1, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 4, 4, 4, 5, 5, 5, 6, 6, 7, 7,
           8, 8, 9, 10]
    dst = [2, 3, 4, 5, 6, 7, 8, 9, 10, 3, 4, 5, 6, 4, 5, 6, 5, 6, 7, 6, 7, 8, 7, 8, 8, 9,
           9, 10, 10, 1]
    return make_graph(range(1, 11), zip(src, dst))


def ranks(rows):
    return {row["id"]: row[PAGERANK] for row in rows}


def test_cycle_ranks_are_uniform_and_normalised():
    graph = make_graph([1, 2, 3], [(1, 2), (2, 3), (3, 1)])
    result = ranks(pagerank(graph).max_iter(10).run())
    assert set(result) == {1, 2, 3}
    assert sum(result.values()) == pytest.approx(1.0)
    assert result[1] == pytest.approx(result[2])
    assert result[2] == pytest.approx(result[3])


def test_zero_iterations_gives_uniform_ranks():
    result = ranks(pagerank(hub_graph()).max_iter(0).run())
    assert set(result) == set(range(1, 11))
    values = list(result.values())
    assert sum(values) == pytest.approx(1.0)
    assert all(value == pytest.approx(values[0]) for value in values)


def test_default_iterations_match_zero_iterations():
    default = ranks(pagerank(hub_graph()).run())
    explicit = ranks(pagerank(hub_graph()).max_iter(0).run())
    assert default == explicit


def test_hub_graph_ranks_sum_to_one_and_are_positive():
    result = ranks(
        pagerank(hub_graph()).max_iter(14).reset_prob(0.15).checkpoint_interval(1).run()
    )
    assert set(result) == set(range(1, 11))
    assert sum(result.values()) == pytest.approx(1.0)
    assert all(value > 0 for value in result.values())


def test_full_reset_probability_ignores_structure():
    result = ranks(pagerank(hub_graph()).max_iter(5).reset_prob(1.0).run())
    values = list(result.values())
    assert sum(values) == pytest.approx(1.0)
    assert all(value == pytest.approx(values[0]) for value in values)


def test_vertices_without_out_edges_are_dropped():
    graph = make_graph([1, 2, 3], [(1, 2), (2, 3)])
    result = ranks(pagerank(graph).max_iter(1).run())
    assert set(result) == {1, 2}
    assert result[1] is None
    assert result[2] == pytest.approx(1.0)


def test_graph_without_edges_gives_no_rows():
    graph = make_graph([1, 2], [])
    assert pagerank(graph).max_iter(3).run() == []


def test_builder_methods_chain_on_same_builder():
    graph = make_graph([1, 2], [(1, 2), (2, 1)])
    builder = pagerank(graph)
    assert isinstance(builder, PageRankBuilder)
    assert builder.max_iter(4).reset_prob(0.2).checkpoint_interval(3) is builder
    result = ranks(builder.run())
    assert result[1] == pytest.approx(result[2])
    assert sum(result.values()) == pytest.approx(1.0)


def test_run_does_not_modify_graph():
    graph = hub_graph()
    vertices_before = [dict(v) for v in graph.vertices]
    edges_before = [dict(e) for e in graph.edges]
    pagerank(graph).max_iter(3).run()
    assert graph.vertices == vertices_before
    assert graph.edges == edges_before