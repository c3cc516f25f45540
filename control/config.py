from __future__ import annotations
from dataclasses import dataclass

from memory.block import MAX_OWNER_NAME

DEFAULT_MEMORY_SIZE = 64  # MB


@dataclass
class SimConfig:
    total_memory: int = DEFAULT_MEMORY_SIZE
    bar_width: int = 50
    max_owner_name: int = MAX_OWNER_NAME
    verify: bool = True  # check block invariants after every mutation

    def __post_init__(self):
        if self.total_memory <= 0:
            raise ValueError(f"total_memory must be positive, got {self.total_memory}")
        if self.bar_width <= 0:
            raise ValueError(f"bar_width must be positive, got {self.bar_width}")
        if self.max_owner_name <= 0:
            raise ValueError(f"max_owner_name must be positive, got {self.max_owner_name}")
