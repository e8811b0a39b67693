"""Parse raw source records into validated taxonomy nodes."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from domain.schemas import TaxonomyNode
from domain.taxonomy.hierarchy import find_orphans

logger = logging.getLogger(__name__)


def parse_taxonomy_nodes(records: Iterable[Mapping[str, Any]]) -> list[TaxonomyNode]:
    """
    Validate pre-loaded source records and build TaxonomyNode objects.

    This is a pure function - it does NOT perform file I/O.
    The file reading happens in infrastructure.io.

    Args:
        records: Sequence of dicts keyed by the source field names
            (CodeValue, CodeDescription, CodeNotes, CodeParent, IssueNumber, Modified)

    Returns:
        List of nodes in input order

    Raises:
        ValueError: If a record fails validation or a code appears more than once
    """
    nodes: list[TaxonomyNode] = []
    seen: set[str] = set()

    for i, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            raise ValueError(f"Record {i}: expected a mapping, got {type(raw).__name__}")
        try:
            node = TaxonomyNode.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(f"Record {i}: invalid taxonomy node: {e}") from e

        if node.code in seen:
            raise ValueError(f"Record {i}: duplicate code {node.code!r}")
        seen.add(node.code)
        nodes.append(node)

    orphans = find_orphans(nodes)
    if orphans:
        # Still handed to the engine, which records them as failed.
        logger.warning(
            "Found %d code(s) with non-existent parents: %s",
            len(orphans),
            ", ".join(f"{n.code}->{n.parent_code}" for n in orphans),
        )

    logger.info("Loaded %d taxonomy nodes", len(nodes))
    return nodes
