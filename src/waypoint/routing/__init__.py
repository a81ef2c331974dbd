"""Route record table, path patterns, and the matcher.

Route configuration is flattened into an ordered lookup table at startup
and may be extended later; the matcher resolves locations against it.
"""
