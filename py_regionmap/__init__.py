"""Procedural Voronoi region maps with MegaRegion clustering."""

__version__ = "0.1.0"
