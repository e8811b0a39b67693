"""Base client interface for catalog backends."""

from abc import ABC, abstractmethod

from domain.schemas import CategoryPayload


class CatalogClient(ABC):
    """
    Abstract base class for catalog clients.
    Common interface for backends that create categories remotely (BigCommerce, Mock).

    All concrete clients must implement:
    - create_category(): Create one category and return its remote id
    """

    name: str = "catalog"

    @abstractmethod
    async def create_category(self, category: CategoryPayload) -> int:
        """Create one category and return its remote id.

        Args:
            category: Payload built by the mapper (parent id already resolved)

        Returns:
            Remote id of the created category

        Raises:
            CatalogError: On rejected or malformed responses (after retries, where applicable)
        """

        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""
        return None
