from __future__ import annotations
import logging
from typing import Tuple

from memory.block import Block, BlockList, BlockStatus
from memory.errors import NotApplicable
from policy.partitioning import PartitionType

logger = logging.getLogger(__name__)


def compact(blocks: BlockList, mode: PartitionType, available: int) -> Tuple[BlockList, int]:
    """Slide occupied blocks to address 0 in their current order.

    Returns the new list and the number of MB that changed address. Remaining
    free memory becomes a single trailing block.
    """
    if mode is not PartitionType.DYNAMIC:
        raise NotApplicable("compaction only applies to dynamic partitions")
    packed = []
    moved = 0
    cursor = 0
    for b in blocks:
        if b.is_free:
            continue
        if b.start_address != cursor:
            moved += b.size
        packed.append(Block(b.id, cursor, b.size, BlockStatus.OCCUPIED, b.owner_name))
        cursor += b.size
    if available > 0:
        next_id = packed[-1].id + 1 if packed else 0
        packed.append(Block(next_id, cursor, available))
    logger.info("compacted %d occupied blocks, %d MB relocated, %d MB free at %d",
                len(packed) - (1 if available > 0 else 0), moved, available, cursor)
    return BlockList(packed), moved
