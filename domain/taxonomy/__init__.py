"""
Taxonomy management: parsing, hierarchy resolution, and field mapping.

This module handles the hierarchical code list (Thema-style) operations.
All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.hierarchy import WavePlan, find_orphans, next_wave, plan_waves
from domain.taxonomy.loader import parse_taxonomy_nodes
from domain.taxonomy.mapper import (
    apply_url_transformations,
    build_url_path,
    map_field,
    map_node_to_category,
)

__all__ = [
    "parse_taxonomy_nodes",
    # Hierarchy
    "WavePlan",
    "plan_waves",
    "next_wave",
    "find_orphans",
    # Mapping
    "map_field",
    "apply_url_transformations",
    "build_url_path",
    "map_node_to_category",
]
