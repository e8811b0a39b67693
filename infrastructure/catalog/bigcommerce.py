"""BigCommerce category-tree client with rate limiting and retries."""

import logging
from typing import Any

import httpx

from domain.schemas import CategoryPayload
from infrastructure.config.models import RunConfig

from .base import CatalogClient
from .errors import CatalogApiError, MalformedResponseError, PermanentCatalogError
from .retry import retry_with_backoff
from .scheduler import RequestScheduler

logger = logging.getLogger(__name__)

CATEGORIES_PATH = "/catalog/trees/categories"


def format_error_detail(body: Any, fallback: str = "") -> str:
    """
    Build a readable error detail from a BigCommerce error body.

    Field-level validation messages (``{"errors": {"field": ["msg", ...]}}``) win over
    ``detail`` and ``title``.
    """
    if not isinstance(body, dict):
        return fallback

    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        parts = []
        for field, messages in errors.items():
            if isinstance(messages, list):
                parts.append(f"{field}: {', '.join(str(m) for m in messages)}")
            else:
                parts.append(f"{field}: {messages}")
        return "; ".join(parts)

    return str(body.get("detail") or body.get("title") or fallback)


def extract_category_id(body: Any) -> int:
    """Return ``data[0].category_id`` or raise MalformedResponseError."""
    data = body.get("data") if isinstance(body, dict) else None
    first = data[0] if isinstance(data, list) and data else None
    category_id = first.get("category_id") if isinstance(first, dict) else None

    if isinstance(category_id, bool) or not isinstance(category_id, int) or category_id <= 0:
        raise MalformedResponseError(f"Invalid response format from catalog API: {body!r}")
    return category_id


class BigCommerceClient(CatalogClient):
    """
    Client for the BigCommerce Category Trees API: POST /catalog/trees/categories

    - Every attempt is queued on one RequestScheduler (minimum interval between calls)
    - Each create call is retried with exponential backoff
    - The request body is a JSON array holding exactly one category
    """

    name = "bigcommerce"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        scheduler: RequestScheduler,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        permanent_statuses: frozenset[int] = frozenset(),
    ) -> None:
        self.client = client
        self.scheduler = scheduler
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.permanent_statuses = permanent_statuses

    @classmethod
    def from_cfg(cls, cfg: RunConfig) -> "BigCommerceClient":
        client = httpx.AsyncClient(
            base_url=cfg.catalog.api_root,
            timeout=cfg.catalog.timeout_s,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-Auth-Token": cfg.catalog.api_token,
            },
        )
        scheduler = RequestScheduler(
            cfg.rate_limit.min_interval_s,
            task_timeout=cfg.rate_limit.task_timeout_s,
        )
        return cls(
            client=client,
            scheduler=scheduler,
            max_attempts=cfg.retry.max_attempts,
            base_delay=cfg.retry.base_delay_s,
            permanent_statuses=frozenset(cfg.retry.permanent_statuses),
        )

    async def create_category(self, category: CategoryPayload) -> int:
        return await retry_with_backoff(
            lambda: self.scheduler.submit(lambda: self._post_category(category)),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
        )

    async def _post_category(self, category: CategoryPayload) -> int:
        payload = [category.to_request_json()]
        try:
            resp = await self.client.post(CATEGORIES_PATH, json=payload)

            if not resp.is_success:
                try:
                    body = resp.json()
                except ValueError:
                    body = None
                detail = format_error_detail(body, fallback=resp.text or resp.reason_phrase)
                if resp.status_code in self.permanent_statuses:
                    raise PermanentCatalogError(resp.status_code, detail)
                raise CatalogApiError(resp.status_code, detail)

            try:
                body = resp.json()
            except ValueError as e:
                raise MalformedResponseError(f"Catalog API returned non-JSON body: {resp.text[:200]!r}") from e
            category_id = extract_category_id(body)

        except Exception as e:
            logger.error(
                "Error creating category: name=%r, parent_id=%s, error=%s",
                category.name,
                category.parent_id,
                e,
            )
            raise

        logger.info('Successfully created category "%s" with ID %d', category.name, category_id)
        return category_id

    async def aclose(self) -> None:
        await self.scheduler.aclose()
        await self.client.aclose()
