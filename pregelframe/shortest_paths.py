"""Shortest paths from every vertex to a set of landmarks, on the Pregel engine."""

from __future__ import annotations

from functools import reduce
from typing import Any, Iterable

from .expr import Aggregate, Expr, col, lit, named_struct, when
from .graphframe import VERTEX_ID, GraphFrame
from .pregel import PREGEL_MSG, MessageDirection, PregelBuilder, pregel_dst, pregel_src

DISTANCES = "distances"
INFINITE_DISTANCE = 2**31 - 1
"""Distance reported for a landmark that cannot be reached."""

_PARTICIPATING = "participating"
_ACTIVE = "active"


def merge_distances(landmarks: Iterable[int], expr: Expr) -> Aggregate:
    """Aggregate that keeps, per landmark, the smallest distance among the structs.

    The result is a struct with one field per landmark, named by its id and
    ordered by id. Fields missing from every input, and empty groups, give
    the infinite distance.
    """
    keys = [str(landmark) for landmark in sorted(set(landmarks))]

    def merge(structs: list[dict[str, Any]]) -> dict[str, int]:
        merged = dict.fromkeys(keys, INFINITE_DISTANCE)
        for struct in structs:
            for key in keys:
                value = struct.get(key)
                if value is not None and value < merged[key]:
                    merged[key] = value
        return merged

    return Aggregate(merge, expr, "_merge_distance_maps")


class ShortestPathsBuilder:
    """Configures and runs the shortest paths computation.

    By default distances are measured from each vertex to the landmarks;
    reversed, from the landmarks to each vertex. The configuration methods
    update the builder and return it, so calls can be chained.
    """

    def __init__(self, graph: GraphFrame, landmarks: Iterable[int]) -> None:
        self.graph = graph
        self.landmarks = sorted(landmarks)
        self._max_iterations = INFINITE_DISTANCE
        self._checkpoint_interval = 1
        self._reversed = False

    def reversed(self, reversed: bool) -> ShortestPathsBuilder:
        """Measure distances from the landmarks to the vertices when true."""
        self._reversed = reversed
        return self

    def max_iterations(self, max_iterations: int) -> ShortestPathsBuilder:
        """Limit the number of supersteps."""
        self._max_iterations = max_iterations
        return self

    def checkpoint_interval(self, checkpoint_interval: int) -> ShortestPathsBuilder:
        """Set how often intermediate results are materialised."""
        self._checkpoint_interval = checkpoint_interval
        return self

    def run(self) -> list[dict[str, Any]]:
        """Return rows of ``id`` and ``distances``, a struct keyed by landmark id."""
        names = [str(landmark) for landmark in self.landmarks]

        init_distances = named_struct(
            *(
                part
                for landmark, name in zip(self.landmarks, names)
                for part in (
                    lit(name),
                    when(col(VERTEX_ID).eq(lit(landmark)), lit(0)).otherwise(
                        lit(INFINITE_DISTANCE)
                    ),
                )
            )
        )

        update_distances = when(col(PREGEL_MSG).is_null(), col(DISTANCES)).otherwise(
            named_struct(*(part for name in names for part in _keep_smaller(name)))
        )

        init_participating = reduce(
            lambda acc, landmark: acc.or_(col(VERTEX_ID).eq(lit(landmark))),
            self.landmarks,
            lit(False),
        )
        update_participating = reduce(
            lambda acc, name: acc.or_(
                col(DISTANCES).field(name).gt(col(PREGEL_MSG).field(name))
            ),
            names,
            lit(False),
        )

        neighbour = pregel_src if self._reversed else pregel_dst
        message_expr = named_struct(
            *(
                part
                for name in names
                for part in (
                    lit(name),
                    when(
                        neighbour(DISTANCES).field(name).lt(lit(INFINITE_DISTANCE)),
                        neighbour(DISTANCES).field(name) + lit(1),
                    ).otherwise(lit(INFINITE_DISTANCE)),
                )
            )
        )
        direction = (
            MessageDirection.SRC_TO_DST if self._reversed else MessageDirection.DST_TO_SRC
        )

        result = (
            PregelBuilder(self.graph)
            .add_vertex_column(DISTANCES, init_distances, update_distances)
            .with_participation_column(
                _PARTICIPATING, init_participating, update_participating
            )
            .add_message(message_expr, direction)
            .with_aggregate_expr(merge_distances(self.landmarks, col(PREGEL_MSG)))
            .with_vertex_voting(_ACTIVE, update_participating)
            .max_iterations(self._max_iterations)
            .checkpoint_interval(2)
            .run(False)
        )
        return [
            {VERTEX_ID: row[VERTEX_ID], DISTANCES: row[DISTANCES]} for row in result.data
        ]


def _keep_smaller(name: str) -> tuple[Expr, Expr]:
    current = col(DISTANCES).field(name)
    received = col(PREGEL_MSG).field(name)
    return lit(name), when(current.lt_eq(received), current).otherwise(received)


def shortest_paths(graph: GraphFrame, landmarks: Iterable[int]) -> ShortestPathsBuilder:
    """Start configuring shortest paths on ``graph`` towards ``landmarks``."""
    return ShortestPathsBuilder(graph, landmarks)