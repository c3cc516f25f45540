from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from memory.block import Block, BlockList
from memory.errors import InvalidConfiguration

logger = logging.getLogger(__name__)


class PartitionType(Enum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"

    @classmethod
    def parse(cls, value: Union["PartitionType", str]) -> "PartitionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidConfiguration(f"unknown partition mode: {value!r}") from None


@dataclass
class PartitionLayout:
    mode: PartitionType
    blocks: BlockList
    total_memory: int
    partition_count: int = 0
    partition_size: int = 0

    @property
    def addressable(self) -> int:
        """Memory actually covered by blocks. Fixed mode may leave a tail uncovered."""
        if self.mode is PartitionType.FIXED:
            return self.partition_count * self.partition_size
        return self.total_memory

    @property
    def unaddressed(self) -> int:
        return self.total_memory - self.addressable


class PartitionManager:
    """Builds a fresh block list for a partitioning discipline."""

    def __init__(self, total_memory: int):
        self.total_memory = total_memory

    def establish(self, mode: Union[PartitionType, str],
                  partition_count: Optional[int] = None) -> PartitionLayout:
        mode = PartitionType.parse(mode)
        if mode is PartitionType.FIXED:
            return self._fixed(partition_count)
        blocks = BlockList([Block(0, 0, self.total_memory)])
        logger.info("dynamic partitioning over %d MB", self.total_memory)
        return PartitionLayout(mode, blocks, self.total_memory)

    def _fixed(self, count: Optional[int]) -> PartitionLayout:
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidConfiguration(f"fixed partitioning needs an integer partition count, got {count!r}")
        if count < 1:
            raise InvalidConfiguration(f"partition count must be at least 1, got {count}")
        size = self.total_memory // count
        if size == 0:
            raise InvalidConfiguration(
                f"{count} partitions do not fit in {self.total_memory} MB")
        blocks = BlockList([Block(i, i * size, size) for i in range(count)])
        layout = PartitionLayout(PartitionType.FIXED, blocks, self.total_memory, count, size)
        if layout.unaddressed:
            logger.info("fixed partitioning: %d x %d MB, %d MB left unaddressed",
                        count, size, layout.unaddressed)
        else:
            logger.info("fixed partitioning: %d x %d MB", count, size)
        return layout
