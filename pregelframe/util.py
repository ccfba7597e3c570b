"""Loading of LDBC Graphalytics style datasets."""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Any, Callable

from .graphframe import EDGE_DST, EDGE_SRC, VERTEX_ID, GraphFrame

_Columns = tuple[tuple[str, Callable[[str], Any]], ...]


def _edge_columns(is_weighted: bool) -> _Columns:
    columns: _Columns = ((EDGE_SRC, int), (EDGE_DST, int))
    if is_weighted:
        columns += (("weights", float),)
    return columns


def _read_rows(path: Path, columns: _Columns) -> list[dict[str, Any]]:
    """Read a headerless, space-delimited file into typed rows."""
    rows = []
    with path.open(newline="", encoding="utf-8") as handle:
        for line_number, record in enumerate(csv.reader(handle, delimiter=" "), start=1):
            if not record:
                continue
            if len(record) != len(columns):
                raise ValueError(
                    f"{path}:{line_number}: expected {len(columns)} fields, found {len(record)}"
                )
            try:
                rows.append(
                    {name: convert(value) for (name, convert), value in zip(columns, record)}
                )
            except ValueError as error:
                raise ValueError(f"{path}:{line_number}: {error}") from None
    return rows


def load_ldbc_graph(
    base_path: str | os.PathLike[str], dataset: str, is_weighted: bool = False
) -> GraphFrame:
    """Load ``<base>/<dataset>/<dataset>.v.csv`` and ``.e.csv`` as a graph.

    Edges have integer ``src`` and ``dst`` columns and, when ``is_weighted``,
    a float ``weights`` column; vertices have an integer ``id`` column.
    """
    directory = Path(base_path) / dataset
    edges = _read_rows(directory / f"{dataset}.e.csv", _edge_columns(is_weighted))
    vertices = _read_rows(directory / f"{dataset}.v.csv", ((VERTEX_ID, int),))
    return GraphFrame(vertices=vertices, edges=edges)


def parse_ldbc_properties(base_path: str | os.PathLike[str], dataset: str) -> dict[str, str]:
    """Read ``<base>/<dataset>/<dataset>.properties`` into a mapping.

    Blank lines and lines starting with ``#`` are skipped, as are lines
    without ``=``; keys and values are stripped of surrounding whitespace.
    """
    path = Path(base_path) / dataset / f"{dataset}.properties"
    properties: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, separator, value = stripped.partition("=")
        if separator:
            properties[key.strip()] = value.strip()
    return properties