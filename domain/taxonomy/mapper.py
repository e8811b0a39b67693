"""Map taxonomy nodes to catalog category payloads (pure functions)."""

import re
from collections.abc import Callable, Sequence

from domain.schemas import CategoryPayload, CategoryUrl, TaxonomyNode
from infrastructure.config.models import MappingConfig

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _render_scalar(value: str | int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# Template variable -> accessor. Keys are the source field names used in templates.
FIELD_ACCESSORS: dict[str, Callable[[TaxonomyNode], str]] = {
    "CodeValue": lambda n: n.code,
    "CodeDescription": lambda n: n.description,
    "CodeNotes": lambda n: n.notes,
    "CodeParent": lambda n: n.parent_code,
    "IssueNumber": lambda n: _render_scalar(n.issue_number),
    "Modified": lambda n: _render_scalar(n.modified),
}


def map_field(template: str, node: TaxonomyNode) -> str:
    """
    Replace ``${Field}`` placeholders with values from the node.

    Examples:
        >>> node = TaxonomyNode(code="ABA", description="Theory of Art", issue_number=1, modified="2024")
        >>> map_field("${CodeValue}: ${CodeDescription}", node)
        'ABA: Theory of Art'
        >>> map_field("${NoSuchField}", node)
        ''
    """

    def _sub(match: re.Match[str]) -> str:
        accessor = FIELD_ACCESSORS.get(match.group(1).strip())
        return accessor(node) if accessor is not None else ""

    return _PLACEHOLDER.sub(_sub, template)


def _slug_segment(segment: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "-", segment).strip("-")


def apply_url_transformations(path: str, transformations: Sequence[str]) -> str:
    """
    Apply the configured transformations in order, then slug every path segment.

    Slugging collapses any run of characters outside [A-Za-z0-9] into a single
    hyphen, so the result is always URL-safe; empty segments are dropped while
    the leading and trailing slash are kept.
    """
    result = path
    for transform in transformations:
        if transform == "lowercase":
            result = result.lower()
        elif transform == "replace-spaces":
            result = re.sub(r"\s+", "-", result)
        elif transform == "remove-special-chars":
            result = re.sub(r"[^a-zA-Z0-9/-]", "", result)
        else:
            raise ValueError(f"Unknown URL transformation: {transform!r}")

    segments = [s for s in (_slug_segment(part) for part in result.split("/")) if s]
    slug = "/".join(segments)
    if path.startswith("/"):
        slug = "/" + slug
    if path.endswith("/") and slug != "/":
        slug += "/"
    return slug


def build_url_path(template: str, node: TaxonomyNode, transformations: Sequence[str]) -> str:
    """Render the URL template for a node and normalize it."""
    return apply_url_transformations(map_field(template, node), transformations)


def map_node_to_category(
    node: TaxonomyNode,
    mapping: MappingConfig,
    tree_id: int,
    parent_id: int | None = None,
) -> CategoryPayload:
    """
    Build the catalog category for a node.

    Args:
        node: Source taxonomy node
        mapping: Field templates and URL settings
        tree_id: Target category tree
        parent_id: Remote id of the parent category (None for a top-level category)

    Raises:
        ValueError: If parent_id is given but is not a positive integer
    """
    if parent_id is not None and (isinstance(parent_id, bool) or not isinstance(parent_id, int) or parent_id <= 0):
        raise ValueError(f"Invalid parent id {parent_id!r} for code {node.code}: must be a positive integer")

    url = None
    if mapping.url is not None:
        url = CategoryUrl(
            path=build_url_path(mapping.url.path, node, mapping.url.transformations),
            is_customized=True,
        )

    return CategoryPayload(
        name=map_field(mapping.name, node),
        description=map_field(mapping.description, node),
        tree_id=tree_id,
        parent_id=parent_id,
        is_visible=mapping.is_visible,
        url=url,
    )
