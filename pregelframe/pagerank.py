"""PageRank computed on the Pregel engine."""

from __future__ import annotations

from typing import Any

from .expr import col, lit, sum_
from .graphframe import VERTEX_ID, GraphFrame
from .pregel import PREGEL_MSG, MessageDirection, PregelBuilder, pregel_src

PAGERANK = "pagerank"
_OUT_DEGREE = "out_degree"
_PAGERANK_SUM = "pagerank_sum"


class PageRankBuilder:
    """Configures and runs PageRank on a graph.

    The configuration methods update the builder and return it, so calls
    can be chained.
    """

    def __init__(self, graph: GraphFrame) -> None:
        self.graph = graph
        self._max_iter = 0
        self._reset_prob = 0.15
        self._include_debug_columns = False
        self._checkpoint_interval = 2

    def max_iter(self, iterations: int) -> PageRankBuilder:
        """Set the number of supersteps to run."""
        self._max_iter = iterations
        return self

    def reset_prob(self, prob: float) -> PageRankBuilder:
        """Set the probability of jumping to a random vertex."""
        self._reset_prob = prob
        return self

    def checkpoint_interval(self, checkpoint_interval: int) -> PageRankBuilder:
        """Set how often intermediate results are materialised."""
        self._checkpoint_interval = checkpoint_interval
        return self

    def run(self) -> list[dict[str, Any]]:
        """Run PageRank and return rows of ``id`` and normalised ``pagerank``.

        Only vertices with outgoing edges take part. A vertex that receives
        no message in the last superstep has a null rank.
        """
        num_vertices = float(self.graph.num_nodes())
        alpha = 1.0 - self._reset_prob
        reset_per_vertex = (lit(self._reset_prob) / lit(num_vertices)).evaluate({})

        graph_with_degrees = GraphFrame(
            vertices=self.graph.out_degrees(), edges=self.graph.edges
        )

        builder = (
            PregelBuilder(graph_with_degrees)
            .max_iterations(self._max_iter)
            .checkpoint_interval(self._checkpoint_interval)
            .add_vertex_column(
                PAGERANK,
                lit(reset_per_vertex),
                lit(reset_per_vertex) + lit(alpha) * col(PREGEL_MSG),
            )
            .add_vertex_column(_OUT_DEGREE, col(_OUT_DEGREE), col(_OUT_DEGREE))
            .add_message(
                pregel_src(PAGERANK) / pregel_src(_OUT_DEGREE),
                MessageDirection.SRC_TO_DST,
            )
            .with_aggregate_expr(sum_(col(PREGEL_MSG)))
        )
        ranked = builder.run(self._include_debug_columns).data
        if not ranked:
            return []

        total = sum_(col(PAGERANK)).alias(_PAGERANK_SUM).evaluate(ranked)
        normalised = (col(PAGERANK) / col(_PAGERANK_SUM)).alias(PAGERANK)
        return [
            {
                VERTEX_ID: row[VERTEX_ID],
                PAGERANK: normalised.evaluate({**row, _PAGERANK_SUM: total}),
            }
            for row in ranked
        ]


def pagerank(graph: GraphFrame) -> PageRankBuilder:
    """Start configuring PageRank on ``graph``."""
    return PageRankBuilder(graph)