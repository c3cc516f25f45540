from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from memory.block import Block, BlockList, BlockStatus, MAX_OWNER_NAME, owner_label
from memory.errors import (DuplicateName, InsufficientMemory, InvalidName,
                           InvalidSize, NoSuitableBlock)
from policy.partitioning import PartitionType

logger = logging.getLogger(__name__)


@dataclass
class Placement:
    block: Block
    charged: int  # MB taken from available memory


class FirstFitAllocator:
    """First-fit placement over an address-ordered block list.

    Fixed partitions are occupied whole and charged at partition size.
    Dynamic blocks are split so the request lands at the block's start.
    """

    def __init__(self, max_owner_name: int = MAX_OWNER_NAME):
        self.max_owner_name = max_owner_name

    def allocate(self, blocks: BlockList, mode: PartitionType, name: str, size: int,
                 available: int) -> Placement:
        name = self._check(blocks, name, size, available)
        found = self._first_fit(blocks, size)
        if found is None:
            raise NoSuitableBlock(
                f"no free block can hold {size} MB for '{name}' ({available} MB free in total)")
        index, block, max_id = found
        if mode is PartitionType.FIXED:
            block.occupy(name)
            placed = Placement(block, block.size)
        elif block.size == size:
            block.occupy(name)
            placed = Placement(block, size)
        else:
            placed = Placement(self._split(blocks, index, max_id + 1, name, size), size)
        logger.debug("placed %s (%d MB) at %d, charged %d MB",
                     name, size, placed.block.start_address, placed.charged)
        return placed

    def _check(self, blocks: BlockList, name: str, size: int, available: int) -> str:
        if isinstance(size, bool) or not isinstance(size, int):
            raise InvalidSize(f"process size must be an integer number of MB, got {size!r}")
        if size <= 0:
            raise InvalidSize(f"process size must be greater than zero, got {size}")
        label = owner_label(name or "", self.max_owner_name)
        if not label:
            raise InvalidName("process name must not be empty")
        if size > available:
            raise InsufficientMemory(f"{size} MB requested, only {available} MB available")
        if blocks.find_owner(label) is not None:
            raise DuplicateName(f"a process named '{label}' is already loaded")
        return label

    @staticmethod
    def _first_fit(blocks: BlockList, size: int) -> Optional[Tuple[int, Block, int]]:
        max_id = 0
        for i, b in enumerate(blocks):
            max_id = max(max_id, b.id)
            if b.is_free and size <= b.size:
                return i, b, max_id
        return None

    @staticmethod
    def _split(blocks: BlockList, index: int, new_id: int, name: str, size: int) -> Block:
        hole = blocks[index]
        placed = Block(new_id, hole.start_address, size, BlockStatus.OCCUPIED, name)
        hole.start_address += size
        hole.size -= size
        blocks.insert_before(index, placed)
        return placed
