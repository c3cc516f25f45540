from __future__ import annotations
import logging
from typing import Optional, Tuple, Union

from control.config import SimConfig
from memory.allocator import FirstFitAllocator
from memory.block import BlockView, owner_label
from memory.compaction import compact
from memory.deallocator import Deallocator
from memory.errors import CorruptBlockList
from memory.fragmentation import FragReport, compute_metrics
from policy.partitioning import PartitionLayout, PartitionManager, PartitionType

logger = logging.getLogger(__name__)


class MemorySimulator:
    """One simulated address space and everything that mutates it.

    Every operation either completes or raises a SimulationError with the
    block list untouched. A new simulator starts in dynamic mode.
    """

    def __init__(self, config: Optional[SimConfig] = None):
        self.config = config or SimConfig()
        self.partitions = PartitionManager(self.config.total_memory)
        self.allocator = FirstFitAllocator(self.config.max_owner_name)
        self.deallocator = Deallocator(self.config.max_owner_name)
        self.last_compaction_moved = 0
        self._layout: PartitionLayout = self.partitions.establish(PartitionType.DYNAMIC)
        self.available_memory = self.total_memory
        logger.info("simulator ready with %d MB", self.total_memory)

    @property
    def total_memory(self) -> int:
        return self.config.total_memory

    @property
    def partition_type(self) -> PartitionType:
        return self._layout.mode

    @property
    def fixed_partition_count(self) -> int:
        return self._layout.partition_count

    @property
    def fixed_partition_size(self) -> int:
        return self._layout.partition_size

    @property
    def unaddressed_memory(self) -> int:
        return self._layout.unaddressed

    def establish_partition_mode(self, mode: Union[PartitionType, str],
                                 count: Optional[int] = None):
        layout = self.partitions.establish(mode, count)
        dropped = len(self._layout.blocks.occupied())
        self._layout = layout
        self.available_memory = self.total_memory
        self.last_compaction_moved = 0
        if dropped:
            logger.info("mode change unloaded %d processes", dropped)
        self._verify()

    def allocate(self, name: str, size_mb: int) -> BlockView:
        placed = self.allocator.allocate(self._layout.blocks, self.partition_type,
                                         name, size_mb, self.available_memory)
        self.available_memory -= placed.charged
        self._verify()
        return placed.block.view()

    def deallocate(self, name: str) -> BlockView:
        released = self.deallocator.deallocate(self._layout.blocks, self.partition_type, name)
        self.available_memory += released.credited
        self._verify()
        return released.block.view()

    def analyze_fragmentation(self) -> FragReport:
        return compute_metrics(self._layout.blocks, self.partition_type)

    def compact(self):
        blocks, moved = compact(self._layout.blocks, self.partition_type, self.available_memory)
        self._layout.blocks = blocks
        self.last_compaction_moved = moved
        self._verify()

    def snapshot(self) -> Tuple[BlockView, ...]:
        return self._layout.blocks.snapshot()

    def find(self, name: str) -> Optional[BlockView]:
        hit = self._layout.blocks.find_owner(owner_label(name, self.config.max_owner_name))
        return hit[1].view() if hit else None

    def _verify(self):
        if not self.config.verify:
            return
        blocks = self._layout.blocks
        fixed = self.partition_type is PartitionType.FIXED
        shape = None
        if fixed:
            size = self._layout.partition_size
            shape = [(i * size, size) for i in range(self._layout.partition_count)]
        blocks.verify(self._layout.addressable, coalesced=not fixed, shape=shape)
        charged = sum(b.size for b in blocks.occupied())
        if self.available_memory != self.total_memory - charged:
            raise CorruptBlockList(
                f"available memory drifted: {self.available_memory} MB tracked, "
                f"{self.total_memory - charged} MB derived")
