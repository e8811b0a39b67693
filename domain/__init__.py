"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- schemas: Pydantic models for taxonomy nodes, catalog payloads and progress records
- taxonomy: Node parsing, hierarchy resolution (orphans, waves) and field mapping
"""

from domain.schemas import (
    CategoryPayload,
    CategoryUrl,
    ImportReport,
    ImportStatus,
    NodeResult,
    ProgressRecord,
    TaxonomyNode,
)

__all__ = [
    "TaxonomyNode",
    "ImportStatus",
    "ProgressRecord",
    "CategoryPayload",
    "CategoryUrl",
    "NodeResult",
    "ImportReport",
]
