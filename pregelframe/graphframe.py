"""Property graph held as vertex and edge rows, with basic degree queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

VERTEX_ID = "id"
EDGE_SRC = "src"
EDGE_DST = "dst"


@dataclass
class GraphFrame:
    """A graph whose vertices and edges are tables of dictionary rows.

    Every vertex row carries an ``id`` column; every edge row carries
    ``src`` and ``dst`` columns naming vertex ids. Other columns are kept
    as they are.
    """

    vertices: list[dict[str, Any]]
    edges: list[dict[str, Any]]

    def __post_init__(self) -> None:
        self.vertices = [dict(row) for row in self.vertices]
        self.edges = [dict(row) for row in self.edges]

    def num_nodes(self) -> int:
        """Number of vertex rows."""
        return len(self.vertices)

    def num_edges(self) -> int:
        """Number of edge rows."""
        return len(self.edges)

    def in_degrees(self) -> list[dict[str, Any]]:
        """Rows of ``id`` and ``in_degree`` for every vertex that is an edge target."""
        return _degrees(self.edges, EDGE_DST, EDGE_SRC, "in_degree")

    def out_degrees(self) -> list[dict[str, Any]]:
        """Rows of ``id`` and ``out_degree`` for every vertex that is an edge source."""
        return _degrees(self.edges, EDGE_SRC, EDGE_DST, "out_degree")


def _degrees(
    edges: Iterable[dict[str, Any]], group_column: str, counted_column: str, label: str
) -> list[dict[str, Any]]:
    """Group edges by one endpoint and count the non-null values of the other."""
    counts: dict[Any, int] = {}
    for edge in edges:
        key = edge[group_column]
        counts.setdefault(key, 0)
        if edge[counted_column] is not None:
            counts[key] += 1
    return [{VERTEX_ID: key, label: total} for key, total in counts.items()]