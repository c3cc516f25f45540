from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from memory.errors import CorruptBlockList

MAX_OWNER_NAME = 19


class BlockStatus(Enum):
    FREE = "FREE"
    OCCUPIED = "OCCUPIED"


def owner_label(name: str, limit: int = MAX_OWNER_NAME) -> str:
    """Bounded owner label: surrounding whitespace dropped, cut to `limit` chars."""
    return name.strip()[:limit]


@dataclass
class Block:
    id: int
    start_address: int
    size: int
    status: BlockStatus = BlockStatus.FREE
    owner_name: str = ""

    @property
    def end(self) -> int:
        return self.start_address + self.size

    @property
    def is_free(self) -> bool:
        return self.status is BlockStatus.FREE

    def occupy(self, name: str):
        self.status = BlockStatus.OCCUPIED
        self.owner_name = name

    def release(self):
        self.status = BlockStatus.FREE
        self.owner_name = ""

    def view(self) -> "BlockView":
        return BlockView(self.id, self.start_address, self.size, self.status, self.owner_name)

    def __repr__(self):
        state = "F" if self.is_free else "O"
        return f"[{state}|{self.id}|{self.start_address}|{self.size}|{self.owner_name}]"


@dataclass(frozen=True)
class BlockView:
    """Read-only copy of a block handed out to renderers."""
    id: int
    start_address: int
    size: int
    status: BlockStatus
    owner_name: str

    @property
    def end(self) -> int:
        return self.start_address + self.size

    @property
    def is_free(self) -> bool:
        return self.status is BlockStatus.FREE


class BlockList:
    """Address-ordered blocks covering [0, extent) with no gaps or overlaps."""

    def __init__(self, blocks: Optional[List[Block]] = None):
        self._blocks: List[Block] = list(blocks or [])

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def __getitem__(self, i: int) -> Block:
        return self._blocks[i]

    @property
    def extent(self) -> int:
        return self._blocks[-1].end if self._blocks else 0

    def index_of(self, block: Block) -> int:
        for i, b in enumerate(self._blocks):
            if b is block:
                return i
        raise CorruptBlockList(f"block {block!r} is not part of this list")

    def find_owner(self, name: str) -> Optional[Tuple[int, Block]]:
        for i, b in enumerate(self._blocks):
            if not b.is_free and b.owner_name == name:
                return i, b
        return None

    def insert_before(self, index: int, block: Block):
        self._blocks.insert(index, block)

    def remove_at(self, index: int) -> Block:
        return self._blocks.pop(index)

    def occupied(self) -> List[Block]:
        return [b for b in self._blocks if not b.is_free]

    def free_blocks(self) -> List[Block]:
        return [b for b in self._blocks if b.is_free]

    def occupied_size(self) -> int:
        return sum(b.size for b in self._blocks if not b.is_free)

    def shape(self) -> List[Tuple[int, int]]:
        return [(b.start_address, b.size) for b in self._blocks]

    def snapshot(self) -> Tuple[BlockView, ...]:
        return tuple(b.view() for b in self._blocks)

    def verify(self, extent: int, coalesced: bool = False,
               shape: Optional[List[Tuple[int, int]]] = None):
        """Raise CorruptBlockList unless the list is contiguous from 0 to `extent`.

        `coalesced` additionally forbids adjacent free blocks; `shape` pins the
        exact (start, size) layout, used for fixed partitions.
        """
        cursor = 0
        owners = set()
        prev: Optional[Block] = None
        for b in self._blocks:
            if b.size <= 0:
                raise CorruptBlockList(f"non-positive block size: {b!r}")
            if b.start_address != cursor:
                raise CorruptBlockList(f"gap or overlap at {cursor}: {b!r}")
            if b.is_free and b.owner_name:
                raise CorruptBlockList(f"free block carries an owner: {b!r}")
            if not b.is_free:
                if not b.owner_name:
                    raise CorruptBlockList(f"occupied block without owner: {b!r}")
                if b.owner_name in owners:
                    raise CorruptBlockList(f"owner bound twice: {b.owner_name!r}")
                owners.add(b.owner_name)
            if coalesced and prev is not None and prev.is_free and b.is_free:
                raise CorruptBlockList(f"adjacent free blocks: {prev!r} {b!r}")
            cursor = b.end
            prev = b
        if cursor != extent:
            raise CorruptBlockList(f"blocks cover [0, {cursor}) instead of [0, {extent})")
        if shape is not None and self.shape() != shape:
            raise CorruptBlockList("fixed partition layout changed")
