# pregelframe

A small, pure-Python graph-analytics library built around a *graph frame*:
a list of vertex rows (dictionaries, each with an `id`) and a list of edge
rows (each with a `src` and a `dst`). On top of it sits a Pregel-style
engine for iterative message passing, and two algorithms written with it:

- **PageRank** — ranks normalised so that they sum to 1.
- **Shortest paths to landmarks** — hop distances from every vertex to (or,
  reversed, from) a chosen set of landmark vertices.

The package has no dependencies outside the standard library.

## Installation

```
pip install pregelframe
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "pregelframe[test]"
pytest
```

## Graph frames

`pregelframe.graphframe.GraphFrame(vertices, edges)` takes two iterables of
dictionary rows and keeps copies of them. Extra columns are kept as they are.

```python
from pregelframe.graphframe import GraphFrame

graph = GraphFrame(
    vertices=[{"id": 1}, {"id": 2}, {"id": 3}],
    edges=[{"src": 1, "dst": 2}, {"src": 2, "dst": 3}, {"src": 1, "dst": 3}],
)
```

- `num_nodes()` and `num_edges()` — row counts;
- `in_degrees()` — rows of `id` and `in_degree`, one per vertex that is the
  target of at least one edge;
- `out_degrees()` — rows of `id` and `out_degree`, one per vertex that is the
  source of at least one edge.

### LDBC datasets

`pregelframe.util` reads datasets laid out as
`<base_path>/<dataset>/<dataset>.{v,e}.csv` (space separated, no header):

- `load_ldbc_graph(base_path, dataset, is_weighted=False)` returns a
  `GraphFrame` with integer `id`, `src` and `dst` columns and, when
  `is_weighted` is true, a float `weights` column on edges. A line with the
  wrong number of fields or a value that does not convert raises
  `ValueError` naming the file and line.
- `parse_ldbc_properties(base_path, dataset)` reads
  `<dataset>.properties` into a dictionary of stripped keys and values,
  skipping blank lines, `#` comments and lines without `=`.

## Expressions

Vertex updates and messages are built from `pregelframe.expr`. Nulls are
`None` and propagate through arithmetic and comparisons; structs are
dictionaries.

- `col(name)` and `lit(value)` — column references and constants;
- `when(condition, value).otherwise(other)` — a conditional;
- `named_struct(name, value, ...)` builds a struct from alternating names
  and values, and `Expr.field(name)` reads a field back;
- comparisons `eq`, `not_eq`, `gt`, `gt_eq`, `lt`, `lt_eq`; the logical
  `or_` (also `|`); null tests `is_null` and `is_not_null`;
- arithmetic with `+`, `-`, `*` and `/` (integer division truncates toward
  zero);
- `alias(name)` names the result column;
- the aggregates `sum_`, `max_`, `min_` and `count` reduce the non-null
  values of an expression over a group of rows (`Aggregate.evaluate(rows)`).

## Pregel

`pregelframe.pregel.pregel(graph)` returns a `PregelBuilder`. Its methods
update the builder and return it, so they can be chained; finish with
`run(include_debug_columns=False)`.

- `add_vertex_column(name, init_expr, update_expr)` — a state column with
  its initial value and its per-superstep update. The update reads the
  aggregated incoming message through the `__pregel_msg` column
  (`pregelframe.pregel.PREGEL_MSG`); it is `None` for a vertex that
  received nothing.
- `add_message(expr, direction)` — what each edge sends, with a
  `MessageDirection` of `SRC_TO_DST`, `DST_TO_SRC` or `BIDIRECTIONAL`.
  Inside a message, `pregel_src(name)`, `pregel_dst(name)` and
  `pregel_edge(name)` refer to the source vertex, the destination vertex
  and the edge. Null messages are dropped.
- `with_aggregate_expr(aggregate)` — how messages to the same vertex are
  combined. Required when more than one message is defined.
- `max_iterations(n)` — an upper bound on the number of supersteps; without
  it the loop runs until voting stops it.
- `with_vertex_voting(activity_column, condition)` — every vertex starts
  active; after each superstep the column is recomputed from `condition`,
  and the run stops once no vertex is active.
- `with_participation_column(column, initial_expr, update_condition)` —
  only edges with at least one participating endpoint send messages.
- `add_edge_column(name)` and `checkpoint_interval(n)` are accepted for
  configuration; since all rows are held in memory they do not change the
  result.

`run` returns a `PregelOutput` with `data` (the final vertex rows) and
`num_iterations`. Unless debug columns are requested, only the declared
vertex columns and `id` are kept; with them the activity and participation
columns are kept too. Running without any message raises `ValueError`, and
so does defining several messages without an aggregate.

Counting in-degrees in a single superstep:

```python
from pregelframe.expr import col, lit, sum_
from pregelframe.pregel import PREGEL_MSG, MessageDirection, pregel

output = (
    pregel(graph)
    .max_iterations(1)
    .add_vertex_column("in_degree", lit(0), col("in_degree") + col(PREGEL_MSG))
    .add_message(lit(1), MessageDirection.SRC_TO_DST)
    .with_aggregate_expr(sum_(col(PREGEL_MSG)))
    .run(False)
)
```

## PageRank

```python
from pregelframe.pagerank import pagerank

ranks = pagerank(graph).max_iter(14).reset_prob(0.15).checkpoint_interval(1).run()
```

`run()` returns rows of `id` and `pagerank`. Only vertices with outgoing
edges take part; each starts at `reset_prob / num_nodes`, and the ranks are
divided by their total so that they sum to 1. A vertex that receives no
message in the last superstep gets `None`. `max_iter` defaults to 0 and
`reset_prob` to 0.15.

## Shortest paths

```python
from pregelframe.shortest_paths import shortest_paths

distances = shortest_paths(graph, [1, 4]).run()
```

Each result row has an `id` and a `distances` dictionary keyed by landmark
id as a string, giving the hop distance from that vertex to the landmark.
Unreachable landmarks are reported as `INFINITE_DISTANCE` (2147483647).
Call `.reversed(True)` to measure distance from the landmarks instead.
`max_iterations` defaults to 2147483647; the computation stops earlier once
no distance improves. `merge_distances(landmarks, expr)` is the aggregate
that keeps the smallest distance per landmark.

## Limits

Everything runs in memory on lists of dictionaries, in a single process.
There is no command-line tool, no persistent storage and no distributed
execution.