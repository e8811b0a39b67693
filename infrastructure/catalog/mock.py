"""Mock catalog client for dry runs and testing."""

import logging

from domain.schemas import CategoryPayload

from .base import CatalogClient

logger = logging.getLogger(__name__)


class MockCatalogClient(CatalogClient):
    """Mock client that never touches the network.

    Ids are handed out sequentially from ``start_id``. ``fixtures`` maps a category
    name to either a fixed id or an exception to raise for that name.
    """

    name = "mock"

    def __init__(
        self,
        *,
        start_id: int = 1000,
        fixtures: dict[str, int | Exception] | None = None,
    ) -> None:
        self._next_id = start_id
        self.fixtures = fixtures or {}
        self.calls: list[CategoryPayload] = []
        logger.info("Initialized Mock catalog client (no real API calls will be made)")

    async def create_category(self, category: CategoryPayload) -> int:
        self.calls.append(category)

        fx = self.fixtures.get(category.name)
        if isinstance(fx, Exception):
            raise fx
        if fx is not None:
            category_id = fx
        else:
            category_id = self._next_id
            self._next_id += 1

        logger.debug("Mock created category %r with ID %d (parent_id=%s)", category.name, category_id, category.parent_id)
        return category_id
