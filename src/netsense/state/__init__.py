"""State layer.

The volatile newest-first cache fed by every acquisition cycle, and the
durable store that receives its contents on export.
"""
