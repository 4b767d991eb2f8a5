"""
Toboro - stay on top of your subgraph indexing status.
"""

__version__ = "0.1.0"
