from __future__ import annotations
import logging
from dataclasses import dataclass

from memory.block import Block, BlockList, MAX_OWNER_NAME, owner_label
from memory.errors import NotFound
from policy.partitioning import PartitionType

logger = logging.getLogger(__name__)


@dataclass
class Release:
    block: Block    # free block now covering the released region
    credited: int   # MB returned to available memory


class Deallocator:
    def __init__(self, max_owner_name: int = MAX_OWNER_NAME):
        self.max_owner_name = max_owner_name

    def deallocate(self, blocks: BlockList, mode: PartitionType, name: str) -> Release:
        label = owner_label(name or "", self.max_owner_name)
        found = blocks.find_owner(label) if label else None
        if found is None:
            raise NotFound(f"no process named '{label or name}' is loaded")
        index, block = found
        credited = block.size
        block.release()
        if mode is PartitionType.DYNAMIC:
            block = self._coalesce(blocks, index)
        logger.debug("released %s, %d MB back, free block now [%d, %d)",
                     label, credited, block.start_address, block.end)
        return Release(block, credited)

    @staticmethod
    def _coalesce(blocks: BlockList, index: int) -> Block:
        # next first, then previous
        current = blocks[index]
        if index + 1 < len(blocks) and blocks[index + 1].is_free:
            current.size += blocks.remove_at(index + 1).size
        if index > 0 and blocks[index - 1].is_free:
            prev = blocks[index - 1]
            prev.size += blocks.remove_at(index).size
            current = prev
        return current
