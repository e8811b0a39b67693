"""Hierarchical import workflow: level-order waves driven through the ledger."""

import asyncio
import logging
from collections.abc import Sequence

from domain.schemas import ImportReport, ImportStatus, NodeResult, ProgressRecord, TaxonomyNode
from domain.taxonomy.hierarchy import plan_waves
from domain.taxonomy.mapper import map_node_to_category
from infrastructure.catalog.base import CatalogClient
from infrastructure.config.models import MissingParentPolicy, RunConfig
from infrastructure.ledger.sqlite import ProgressLedger
from infrastructure.observability.logging import set_log_context

logger = logging.getLogger(__name__)


class ParentNotFoundError(Exception):
    """The declared parent code is not part of the input set (orphan)."""

    def __init__(self, parent_code: str) -> None:
        self.parent_code = parent_code
        super().__init__(f"Parent category {parent_code} not found")


class ParentNotReadyError(Exception):
    """The parent is in the input set but has no completed remote category."""

    def __init__(self, parent_code: str) -> None:
        self.parent_code = parent_code
        super().__init__(f"Parent category {parent_code} not ready")


class HierarchicalProcessor:
    """
    Create remote categories for a forest of taxonomy nodes, parents before children.

    Nodes are processed in strict level order: orphans first (recorded failed
    without a remote call), then wave after wave. A wave only starts once every
    node of the previous wave has a terminal ledger record. Nodes inside a wave
    are submitted concurrently; the catalog client serializes actual dispatch.
    """

    def __init__(self, ledger: ProgressLedger, client: CatalogClient, cfg: RunConfig) -> None:
        self.ledger = ledger
        self.client = client
        self.cfg = cfg
        self._input_codes: set[str] = set()

    async def process_nodes(self, nodes: Sequence[TaxonomyNode]) -> ImportReport:
        report = ImportReport(total_input=len(nodes))
        self._input_codes = {n.code for n in nodes}

        plan = plan_waves(nodes)
        logger.info(
            "Processing %d node(s): %d orphan(s), %d wave(s)",
            len(nodes),
            len(plan.orphans),
            plan.depth,
        )

        if plan.orphans:
            report.results.extend(await self._run_wave(plan.orphans))

        for depth, wave in enumerate(plan.waves):
            logger.info("Wave %d: %d node(s)", depth, len(wave))
            report.results.extend(await self._run_wave(wave))

        if plan.unresolved:
            report.unresolved_codes = [n.code for n in plan.unresolved]
            logger.error(
                "Circular dependency detected: %d node(s) left unprocessed: %s",
                len(report.unresolved_codes),
                ", ".join(report.unresolved_codes),
            )

        logger.info(
            "Import finished: succeeded=%d (cached=%d), failed=%d, unresolved=%d",
            report.succeeded,
            report.cached,
            report.failed,
            len(report.unresolved_codes),
        )
        return report

    async def _run_wave(self, wave: Sequence[TaxonomyNode]) -> list[NodeResult]:
        """
        Run one wave concurrently; results keep input order.

        An error escaping process_node (e.g. a ledger write failure) cancels the
        rest of the wave; the cancelled tasks are awaited before it propagates.
        """
        tasks = [asyncio.create_task(self.process_node(n), name=f"node-{n.code}") for n in wave]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def process_node(self, node: TaxonomyNode) -> NodeResult:
        """Drive one node to a terminal outcome. Never raises for per-node failures."""
        set_log_context(node_code=node.code)

        existing = self.ledger.get(node.code)
        if existing is not None and existing.status is ImportStatus.COMPLETED and existing.remote_id is not None:
            logger.debug("Code %s already imported as %d; skipping", node.code, existing.remote_id)
            return NodeResult(code=node.code, remote_id=existing.remote_id, cached=True)

        self._start(node, existing)

        try:
            parent_id = self.resolve_parent_id(node)
            category = map_node_to_category(
                node,
                self.cfg.mapping,
                self.cfg.import_.category_tree_id,
                parent_id,
            )
            remote_id = await self.client.create_category(category)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error("Failed to process code %s: %s", node.code, message)
            self.ledger.update(node.code, status=ImportStatus.FAILED, error=message)
            return NodeResult(code=node.code, error=message)

        self.ledger.update(node.code, status=ImportStatus.COMPLETED, remote_id=remote_id, error=None)
        return NodeResult(code=node.code, remote_id=remote_id)

    def _start(self, node: TaxonomyNode, existing: ProgressRecord | None) -> None:
        """Create the PENDING record, or reset a record left by an earlier run."""
        if existing is None:
            self.ledger.insert(
                ProgressRecord(
                    code=node.code,
                    parent_code=node.parent_code or None,
                    status=ImportStatus.PENDING,
                )
            )
            return

        logger.info(
            "Retrying code %s (previous status=%s, attempt run #%d)",
            node.code,
            existing.status.value,
            existing.retry_count + 2,
        )
        self.ledger.update(
            node.code,
            parent_code=node.parent_code or None,
            status=ImportStatus.PENDING,
            error=None,
            retry_count=existing.retry_count + 1,
        )

    def resolve_parent_id(self, node: TaxonomyNode) -> int | None:
        """
        Remote id to use as parent for ``node``.

        - root: the configured default parent (may be None)
        - parent absent from the input: ParentNotFoundError
        - parent completed: its remote id
        - parent not completed: ParentNotReadyError, or the default parent when the
          fallback policy is configured
        """
        default_parent = self.cfg.import_.parent_category_id

        if node.is_root:
            return default_parent

        if node.parent_code not in self._input_codes:
            raise ParentNotFoundError(node.parent_code)

        parent = self.ledger.get(node.parent_code)
        if parent is not None and parent.status is ImportStatus.COMPLETED and parent.remote_id is not None:
            return parent.remote_id

        if self.cfg.import_.missing_parent_policy is MissingParentPolicy.FALLBACK_TO_DEFAULT:
            logger.warning(
                "Parent %s of code %s is not ready; falling back to default parent %s",
                node.parent_code,
                node.code,
                default_parent,
            )
            return default_parent

        raise ParentNotReadyError(node.parent_code)
