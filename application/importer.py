"""Run-level import entry points."""

import asyncio
import logging
from collections.abc import Sequence

from application.processor import HierarchicalProcessor
from domain.schemas import ImportReport, TaxonomyNode
from infrastructure.catalog.base import CatalogClient
from infrastructure.catalog.factory import make_client
from infrastructure.config.models import RunConfig
from infrastructure.ledger.sqlite import ProgressLedger

logger = logging.getLogger(__name__)


async def run_import(
    cfg: RunConfig,
    nodes: Sequence[TaxonomyNode],
    *,
    client: CatalogClient,
    ledger: ProgressLedger,
) -> ImportReport:
    """
    Import all nodes with an already-open client and ledger.

    Per-node failures are reported, not raised. The client is closed on exit.
    """
    processor = HierarchicalProcessor(ledger=ledger, client=client, cfg=cfg)
    try:
        return await processor.process_nodes(nodes)
    finally:
        await client.aclose()


def import_taxonomy(
    cfg: RunConfig,
    nodes: Sequence[TaxonomyNode],
    *,
    use_mock: bool = False,
) -> ImportReport:
    """
    Open the ledger, build the catalog client and run the import to completion.

    Raises only for structural failures before node processing (e.g. the ledger
    cannot be opened).
    """
    logger.info("Opening progress ledger at %s", cfg.database)
    with ProgressLedger(cfg.database) as ledger:
        client = make_client(cfg, use_mock=use_mock)
        report = asyncio.run(run_import(cfg, nodes, client=client, ledger=ledger))

        counts = ledger.count_by_status()
        logger.info(
            "Ledger totals: %s",
            ", ".join(f"{status.value}={n}" for status, n in counts.items()),
        )
    return report
