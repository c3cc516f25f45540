from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

from memory.block import BlockList
from policy.partitioning import PartitionType

# Occupants of a fixed partition are assumed to use 70% of it.
ASSUMED_UTILIZATION = 0.7


@dataclass
class FragReport:
    internal: int
    external: int
    total_free: int = 0
    largest_free: int = 0
    hole_count: int = 0

    def __iter__(self) -> Iterator[int]:
        # allows `internal, external = sim.analyze_fragmentation()`
        yield self.internal
        yield self.external


def partition_waste(size: int) -> int:
    return size - int(size * ASSUMED_UTILIZATION)


def compute_metrics(blocks: BlockList, mode: PartitionType) -> FragReport:
    free = [b.size for b in blocks if b.is_free]
    total_free = sum(free)
    if mode is PartitionType.FIXED:
        internal = sum(partition_waste(b.size) for b in blocks if not b.is_free)
        external = 0
    else:
        internal = 0
        external = total_free
    return FragReport(internal, external, total_free, max(free, default=0), len(free))
