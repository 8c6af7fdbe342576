"""
#WHERE
    Imported by weaver.py (rebuilt on structural change) and
    test_connection_graph.py.

#WHAT
    Connection Graph Builder: every particle pair within a distance
    threshold, measured on original (not animated) positions, exported as
    index pairs and a flat line-segment buffer.

#INPUT
    Flat or (N, 3) positions, particle count, max distance.

#OUTPUT
    ConnectionGraph (pairs, segments).
"""

from .builder import ConnectionGraph, build_connections

__all__ = ["ConnectionGraph", "build_connections"]
