"""Ingestion layer.

Turns raw provider output into canonical records: per-technology
normalization, role categorization, and the dual-source acquisition cycle.
"""

__all__: list[str] = []
