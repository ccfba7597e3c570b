"""In-memory graph frames with a Pregel-style engine, PageRank and landmark shortest paths."""

__version__ = "0.1.0"