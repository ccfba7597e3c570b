"""A bulk-synchronous Pregel engine over the rows of a GraphFrame.

Each superstep joins vertices with edges into triplets, generates messages
along the configured directions, aggregates them per target vertex and
recomputes every vertex column from the vertex row and the aggregated
message, which is available as the ``__pregel_msg`` column.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from .expr import Aggregate, Expr, col, lit
from .graphframe import EDGE_DST, EDGE_SRC, VERTEX_ID, GraphFrame

PREGEL_MSG = "__pregel_msg"
PREGEL_MSG_SRC = "__pregel_msg_src"
PREGEL_MSG_DST = "__pregel_msg_dst"
PREGEL_MSG_EDGE = "__pregel_msg_edge"

Row = dict[str, Any]


class MessageDirection(Enum):
    """Direction in which a message travels along an edge."""

    SRC_TO_DST = "src_to_dst"
    DST_TO_SRC = "dst_to_src"
    BIDIRECTIONAL = "bidirectional"


@dataclass(frozen=True)
class VertexColumn:
    """A vertex column with its initial and per-superstep update expressions."""

    name: str
    init_expr: Expr
    update_expr: Expr


@dataclass(frozen=True)
class Message:
    """A message expression evaluated on triplets and its direction."""

    expr: Expr
    direction: MessageDirection


@dataclass
class PregelOutput:
    """Final vertex rows and the number of supersteps that ran."""

    data: list[Row]
    num_iterations: int


def pregel_src(col_name: str) -> Expr:
    """Column ``col_name`` of the source vertex of a triplet."""
    return col(PREGEL_MSG_SRC).field(col_name)


def pregel_dst(col_name: str) -> Expr:
    """Column ``col_name`` of the destination vertex of a triplet."""
    return col(PREGEL_MSG_DST).field(col_name)


def pregel_edge(col_name: str) -> Expr:
    """Column ``col_name`` of the edge of a triplet."""
    return col(PREGEL_MSG_EDGE).field(col_name)


class PregelBuilder:
    """Configures and runs a Pregel computation on a graph.

    The configuration methods update the builder and return it, so calls
    can be chained.
    """

    def __init__(self, graph: GraphFrame) -> None:
        self.graph = graph
        self._max_iterations: int | None = None
        self._activity_column: str | None = None
        self._voting_condition: Expr | None = None
        self._vertex_columns: list[VertexColumn] = []
        self._edge_columns: list[str] = []
        self._participation_column: VertexColumn | None = None
        self._messages: list[Message] = []
        self._aggregate_expr: Aggregate | None = None
        # Rows are materialised every superstep, so checkpointing has no
        # further effect; the setting is kept for configuration parity.
        self._checkpoint_interval = 0

    def max_iterations(self, max_iterations: int) -> PregelBuilder:
        """Limit the number of supersteps."""
        self._max_iterations = max_iterations
        return self

    def checkpoint_interval(self, checkpoint_interval: int) -> PregelBuilder:
        """Set how often intermediate results are materialised."""
        self._checkpoint_interval = checkpoint_interval
        return self

    def with_vertex_voting(self, activity_column: str, voting_condition: Expr) -> PregelBuilder:
        """Stop early once ``voting_condition`` holds for no vertex."""
        self._activity_column = activity_column
        self._voting_condition = voting_condition
        return self

    def add_vertex_column(self, name: str, init_expr: Expr, update_expr: Expr) -> PregelBuilder:
        """Add a vertex column computed by ``init_expr`` and then ``update_expr``."""
        self._vertex_columns.append(VertexColumn(name, init_expr, update_expr))
        return self

    def add_edge_column(self, name: str) -> PregelBuilder:
        """Record an edge column to include."""
        self._edge_columns.append(name)
        return self

    def with_participation_column(
        self, column: str, initial_expr: Expr, update_condition: Expr
    ) -> PregelBuilder:
        """Only triplets with a participating endpoint generate messages."""
        self._participation_column = VertexColumn(column, initial_expr, update_condition)
        return self

    def add_message(self, expr: Expr, direction: MessageDirection) -> PregelBuilder:
        """Add a message generated from every triplet."""
        self._messages.append(Message(expr, direction))
        return self

    def with_aggregate_expr(self, expr: Aggregate) -> PregelBuilder:
        """Set how the messages arriving at one vertex are combined."""
        self._aggregate_expr = expr
        return self

    def run(self, include_debug_columns: bool = False) -> PregelOutput:
        """Run the computation and return the final vertex rows.

        Without debug columns the rows hold the vertex columns and ``id``;
        with them they also hold the activity and participation columns.
        """
        if not self._messages:
            raise ValueError("No messages defined for Pregel algorithm")
        if self._aggregate_expr is None and len(self._messages) > 1:
            raise ValueError(
                "Aggregate expression is required when multiple messages are defined"
            )

        vertices = [dict(row) for row in self.graph.vertices]
        for column in self._vertex_columns:
            vertices = _with_column(vertices, column.name, column.init_expr)

        routes = list(self._routes())
        update_columns = [c.update_expr.alias(c.name) for c in self._vertex_columns]

        if self._activity_column is not None:
            vertices = _with_column(vertices, self._activity_column, lit(True))
            update_columns.append(self._voting_condition.alias(self._activity_column))

        participation = self._participation_column
        if participation is not None:
            vertices = _with_column(vertices, participation.name, participation.init_expr)
            update_columns.append(participation.update_expr.alias(participation.name))
            participation_filter = pregel_src(participation.name).or_(
                pregel_dst(participation.name)
            )
        update_columns.append(col(VERTEX_ID).alias(VERTEX_ID))

        edges = [dict(edge) for edge in self.graph.edges]

        iteration = 0
        while self._max_iterations is None or iteration < self._max_iterations:
            iteration += 1
            triplets = _triplets(vertices, edges)
            if participation is not None:
                triplets = [t for t in triplets if participation_filter.evaluate(t)]

            messages = [
                {VERTEX_ID: target.evaluate(triplet), PREGEL_MSG: payload.evaluate(triplet)}
                for target, payload in routes
                for triplet in triplets
            ]
            messages = [m for m in messages if m[PREGEL_MSG] is not None]
            if self._aggregate_expr is not None:
                messages = _aggregate_messages(messages, self._aggregate_expr)

            vertices = _select(_attach_messages(vertices, messages), update_columns)

            if self._activity_column is not None and not any(
                row[self._activity_column] for row in vertices
            ):
                break

        if not include_debug_columns:
            required = [col(c.name) for c in self._vertex_columns]
            required.append(col(VERTEX_ID))
            vertices = _select(vertices, required)

        return PregelOutput(data=vertices, num_iterations=iteration)

    def _routes(self) -> Iterator[tuple[Expr, Expr]]:
        """Pairs of (target vertex id, message payload) expressions."""
        for message in self._messages:
            if message.direction in (MessageDirection.SRC_TO_DST, MessageDirection.BIDIRECTIONAL):
                yield pregel_dst(VERTEX_ID), message.expr
            if message.direction in (MessageDirection.DST_TO_SRC, MessageDirection.BIDIRECTIONAL):
                yield pregel_src(VERTEX_ID), message.expr


def pregel(graph: GraphFrame) -> PregelBuilder:
    """Start configuring a Pregel computation on ``graph``."""
    return PregelBuilder(graph)


def _with_column(rows: list[Row], name: str, expr: Expr) -> list[Row]:
    return [{**row, name: expr.evaluate(row)} for row in rows]


def _select(rows: list[Row], exprs: list[Expr]) -> list[Row]:
    names = [expr.name for expr in exprs]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate output column names: {names}")
    return [{expr.name: expr.evaluate(row) for expr in exprs} for row in rows]


def _index_by_id(vertices: list[Row]) -> dict[Any, list[Row]]:
    index: dict[Any, list[Row]] = {}
    for vertex in vertices:
        key = vertex[VERTEX_ID]
        if key is not None:
            index.setdefault(key, []).append(vertex)
    return index


def _triplets(vertices: list[Row], edges: list[Row]) -> list[Row]:
    """Inner join of source vertex, edge and destination vertex."""
    by_id = _index_by_id(vertices)
    edges_by_src: dict[Any, list[Row]] = {}
    for edge in edges:
        if edge[EDGE_SRC] is not None:
            edges_by_src.setdefault(edge[EDGE_SRC], []).append(edge)
    triplets = []
    for src in vertices:
        if src[VERTEX_ID] is None:
            continue
        for edge in edges_by_src.get(src[VERTEX_ID], ()):
            if edge[EDGE_DST] is None:
                continue
            for dst in by_id.get(edge[EDGE_DST], ()):
                triplets.append(
                    {PREGEL_MSG_SRC: src, PREGEL_MSG_EDGE: edge, PREGEL_MSG_DST: dst}
                )
    return triplets


def _aggregate_messages(messages: list[Row], aggregate: Aggregate) -> list[Row]:
    groups: dict[Any, list[Row]] = {}
    for message in messages:
        groups.setdefault(message[VERTEX_ID], []).append(message)
    return [
        {VERTEX_ID: key, PREGEL_MSG: aggregate.evaluate(group)}
        for key, group in groups.items()
    ]


def _attach_messages(vertices: list[Row], messages: list[Row]) -> list[Row]:
    """Left join of vertices with messages on the vertex id."""
    by_target: dict[Any, list[Any]] = {}
    for message in messages:
        if message[VERTEX_ID] is not None:
            by_target.setdefault(message[VERTEX_ID], []).append(message[PREGEL_MSG])
    joined = []
    for vertex in vertices:
        key = vertex[VERTEX_ID]
        payloads = by_target.get(key, []) if key is not None else []
        if payloads:
            joined.extend({**vertex, PREGEL_MSG: payload} for payload in payloads)
        else:
            joined.append({**vertex, PREGEL_MSG: None})
    return joined