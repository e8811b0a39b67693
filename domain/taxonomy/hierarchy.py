"""Hierarchy resolution over a flat node list: orphans and level-order waves."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from domain.schemas import TaxonomyNode


def find_orphans(nodes: Sequence[TaxonomyNode]) -> list[TaxonomyNode]:
    """Nodes whose declared parent code is not the code of any node in the input."""
    codes = {n.code for n in nodes}
    return [n for n in nodes if not n.is_root and n.parent_code not in codes]


def next_wave(nodes: Sequence[TaxonomyNode], processed: set[str]) -> list[TaxonomyNode]:
    """
    Select the nodes that can be processed now.

    A node belongs to the wave when it has not been processed yet and it is
    either a root or its parent has already been processed (successfully or not).
    Input order is preserved.
    """
    return [n for n in nodes if n.code not in processed and (n.is_root or n.parent_code in processed)]


@dataclass
class WavePlan:
    """Static level-order plan: orphans first, then waves, then whatever never became processable."""

    orphans: list[TaxonomyNode] = field(default_factory=list)
    waves: list[list[TaxonomyNode]] = field(default_factory=list)
    unresolved: list[TaxonomyNode] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.waves)


def plan_waves(nodes: Sequence[TaxonomyNode]) -> WavePlan:
    """
    Compute the processing order for a forest.

    Wave n contains exactly the nodes whose parent is in wave n-1 (or that are
    roots for wave 0). Orphans are placed before the first wave and count as
    processed, so their children join the waves and fail as "not ready".

    When no wave can be formed while unprocessed nodes remain, the leftovers form
    a cycle (or hang off one) and are returned in ``unresolved``.
    """
    plan = WavePlan(orphans=find_orphans(nodes))
    processed: set[str] = {n.code for n in plan.orphans}

    while len(processed) < len(nodes):
        wave = next_wave(nodes, processed)
        if not wave:
            plan.unresolved = [n for n in nodes if n.code not in processed]
            break
        plan.waves.append(wave)
        processed.update(n.code for n in wave)

    return plan
