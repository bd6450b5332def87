"""Public interface for the Neo4j graph mirror adapter."""

from __future__ import annotations

from .graph_store import DisabledGraphStore, Neo4jGraphStore, build_graph_store

__all__ = ["DisabledGraphStore", "Neo4jGraphStore", "build_graph_store"]
