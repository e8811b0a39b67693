import asyncio
import json
import sqlite3

import httpx
import pytest

from application.importer import run_import
from domain.schemas import ImportReport, ImportStatus, TaxonomyNode
from infrastructure.catalog import BigCommerceClient, CatalogApiError, MockCatalogClient, RequestScheduler
from infrastructure.config.models import CatalogConfig, ImportConfig, MappingConfig, MissingParentPolicy, RunConfig
from infrastructure.ledger import ProgressLedger


def _node(code: str, parent: str = "") -> TaxonomyNode:
    return TaxonomyNode(code=code, description=f"Desc {code}", parent_code=parent, issue_number=1, modified="1.0")


def _cfg(
    parent_category_id: int | None = None,
    policy: MissingParentPolicy = MissingParentPolicy.STRICT,
) -> RunConfig:
    return RunConfig(
        catalog=CatalogConfig(store_hash="h", api_token="t"),
        import_=ImportConfig(
            category_tree_id=1,
            parent_category_id=parent_category_id,
            missing_parent_policy=policy,
        ),
        mapping=MappingConfig(name="${CodeDescription}"),
    )


def _run(nodes, ledger: ProgressLedger, client: MockCatalogClient, cfg: RunConfig | None = None) -> ImportReport:
    return asyncio.run(run_import(cfg or _cfg(), nodes, client=client, ledger=ledger))


def _parents(client: MockCatalogClient) -> dict[str, int | None]:
    return {c.name: c.parent_id for c in client.calls}


def test_chain_is_created_top_down_with_parent_ids() -> None:
    nodes = [_node("AAA", "AA"), _node("AA", "A"), _node("A")]
    client = MockCatalogClient(start_id=100)

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client)

        assert [c.name for c in client.calls] == ["Desc A", "Desc AA", "Desc AAA"]
        assert _parents(client) == {"Desc A": None, "Desc AA": 100, "Desc AAA": 101}
        assert report.succeeded == 3
        assert report.failed == 0
        for code, remote_id in [("A", 100), ("AA", 101), ("AAA", 102)]:
            rec = ledger.get(code)
            assert rec is not None
            assert rec.status is ImportStatus.COMPLETED
            assert rec.remote_id == remote_id


def test_failed_parent_fails_descendants_without_calls() -> None:
    nodes = [_node("A"), _node("AA", "A"), _node("AAA", "AA"), _node("B")]
    client = MockCatalogClient(fixtures={"Desc A": CatalogApiError(500, "boom")})

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client)

        assert [c.name for c in client.calls] == ["Desc A", "Desc B"]
        assert report.errors == {
            "A": "Catalog API error (500): boom",
            "AA": "Parent category A not ready",
            "AAA": "Parent category AA not ready",
        }
        assert report.succeeded == 1
        rec = ledger.get("AA")
        assert rec is not None
        assert rec.status is ImportStatus.FAILED
        assert rec.error == "Parent category A not ready"


def test_orphans_fail_without_remote_call() -> None:
    nodes = [_node("A"), _node("X", "MISSING")]
    client = MockCatalogClient()

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client)

        assert [c.name for c in client.calls] == ["Desc A"]
        assert report.errors == {"X": "Parent category MISSING not found"}
        # orphans are processed before the first wave
        assert [r.code for r in report.results] == ["X", "A"]
        rec = ledger.get("X")
        assert rec is not None
        assert rec.status is ImportStatus.FAILED
        assert rec.parent_code == "MISSING"


def test_second_run_is_served_from_the_ledger() -> None:
    nodes = [_node("A"), _node("AA", "A")]

    with ProgressLedger(":memory:") as ledger:
        _run(nodes, ledger, MockCatalogClient(start_id=10))

        client = MockCatalogClient(start_id=500)
        report = _run(nodes, ledger, client)

        assert client.calls == []
        assert report.succeeded == 2
        assert report.cached == 2
        assert report.result_for("AA").remote_id == 11  # type: ignore[union-attr]


def test_failed_nodes_are_retried_on_rerun() -> None:
    nodes = [_node("A"), _node("AA", "A"), _node("B")]

    with ProgressLedger(":memory:") as ledger:
        _run(nodes, ledger, MockCatalogClient(start_id=1, fixtures={"Desc A": CatalogApiError(503, "down")}))
        assert ledger.get("A").status is ImportStatus.FAILED  # type: ignore[union-attr]

        client = MockCatalogClient(start_id=50)
        report = _run(nodes, ledger, client)

        assert [c.name for c in client.calls] == ["Desc A", "Desc AA"]
        assert report.failed == 0
        assert report.cached == 1

        a = ledger.get("A")
        aa = ledger.get("AA")
        b = ledger.get("B")
        assert a is not None and aa is not None and b is not None
        assert (a.status, a.remote_id, a.error, a.retry_count) == (ImportStatus.COMPLETED, 50, None, 1)
        assert (aa.status, aa.remote_id, aa.retry_count) == (ImportStatus.COMPLETED, 51, 1)
        assert b.retry_count == 0
        assert _parents(client)["Desc AA"] == 50


def test_cycle_members_are_reported_unresolved() -> None:
    nodes = [_node("A"), _node("C1", "C2"), _node("C2", "C1")]
    client = MockCatalogClient()

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client)

        assert report.unresolved_codes == ["C1", "C2"]
        assert report.succeeded == 1
        assert report.failed == 0
        assert ledger.get("C1") is None
        assert ledger.get("C2") is None
        assert [c.name for c in client.calls] == ["Desc A"]


def test_roots_attach_to_default_parent() -> None:
    nodes = [_node("A"), _node("AA", "A")]
    client = MockCatalogClient(start_id=300)

    with ProgressLedger(":memory:") as ledger:
        _run(nodes, ledger, client, _cfg(parent_category_id=5))

    assert _parents(client) == {"Desc A": 5, "Desc AA": 300}


def test_fallback_policy_attaches_child_to_default_parent() -> None:
    nodes = [_node("A"), _node("AA", "A"), _node("X", "MISSING")]
    client = MockCatalogClient(start_id=300, fixtures={"Desc A": CatalogApiError(500, "boom")})
    cfg = _cfg(parent_category_id=5, policy=MissingParentPolicy.FALLBACK_TO_DEFAULT)

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client, cfg)

    assert _parents(client) == {"Desc A": 5, "Desc AA": 5}
    # orphans still fail under the fallback policy
    assert report.errors == {"X": "Parent category MISSING not found", "A": "Catalog API error (500): boom"}
    assert report.result_for("AA").ok  # type: ignore[union-attr]


def test_wave_results_keep_input_order() -> None:
    nodes = [_node("B"), _node("A"), _node("BA", "B"), _node("AA", "A")]
    client = MockCatalogClient(start_id=1)

    with ProgressLedger(":memory:") as ledger:
        report = _run(nodes, ledger, client)

    assert [r.code for r in report.results] == ["B", "A", "BA", "AA"]
    assert [c.name for c in client.calls] == ["Desc B", "Desc A", "Desc BA", "Desc AA"]
    assert _parents(client) == {"Desc B": None, "Desc A": None, "Desc BA": 1, "Desc AA": 2}


def test_parent_is_completed_in_ledger_before_child_call() -> None:
    nodes = [_node("A"), _node("AA", "A"), _node("AB", "A"), _node("AAA", "AA")]
    by_name = {f"Desc {n.code}": n for n in nodes}

    with ProgressLedger(":memory:") as ledger:

        class CheckingClient(MockCatalogClient):
            async def create_category(self, category):
                node = by_name[category.name]
                if not node.is_root:
                    parent = ledger.get(node.parent_code)
                    assert parent is not None and parent.status is ImportStatus.COMPLETED
                    assert category.parent_id == parent.remote_id
                return await super().create_category(category)

        client = CheckingClient()
        report = _run(nodes, ledger, client)

    assert report.failed == 0
    assert len(client.calls) == 4


def test_waves_dispatch_in_order_through_scheduler_and_retry() -> None:
    nodes = [_node("B"), _node("A"), _node("BA", "B"), _node("AA", "A"), _node("AAA", "AA")]
    dispatched: list[str] = []
    ids = {"B": 200, "A": 100, "BA": 201, "AA": 101, "AAA": 102}

    def handler(request: httpx.Request) -> httpx.Response:
        code = json.loads(request.content)[0]["name"].removeprefix("Desc ")
        dispatched.append(code)
        if code == "A" and dispatched.count("A") == 1:
            return httpx.Response(503, json={"title": "Service Unavailable"})
        return httpx.Response(200, json={"data": [{"category_id": ids[code]}]})

    http = httpx.AsyncClient(base_url="https://api.example.test/v3", transport=httpx.MockTransport(handler))
    client = BigCommerceClient(client=http, scheduler=RequestScheduler(0), max_attempts=3, base_delay=0)

    with ProgressLedger(":memory:") as ledger:
        report = asyncio.run(run_import(_cfg(), nodes, client=client, ledger=ledger))

        # the retried A stays inside wave 0
        assert dispatched == ["B", "A", "A", "BA", "AA", "AAA"]
        assert report.failed == 0
        for code, remote_id in ids.items():
            rec = ledger.get(code)
            assert rec is not None
            assert (rec.status, rec.remote_id) == (ImportStatus.COMPLETED, remote_id)


class _BrokenLedger(ProgressLedger):
    def update(self, code, **fields):
        if code == "A" and fields.get("status") is ImportStatus.COMPLETED:
            raise sqlite3.OperationalError("disk I/O error")
        return super().update(code, **fields)


def test_ledger_failure_stops_the_wave_before_client_closes() -> None:
    events: list[str] = []

    class SlowClient(MockCatalogClient):
        async def create_category(self, category):
            if category.name == "Desc B":
                try:
                    await asyncio.sleep(1)
                finally:
                    events.append("B stopped")
            return await super().create_category(category)

        async def aclose(self) -> None:
            events.append("closed")

    with _BrokenLedger(":memory:") as ledger:
        with pytest.raises(sqlite3.OperationalError):
            _run([_node("A"), _node("B")], ledger, SlowClient())

        b = ledger.get("B")
        assert b is not None and b.status is ImportStatus.PENDING

    assert events == ["B stopped", "closed"]
