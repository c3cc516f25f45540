from __future__ import annotations
from typing import List, Sequence

from memory.block import BlockView

FREE_CHAR = '.'
USED_CHAR = '#'


def render_map(blocks: Sequence[BlockView], total: int, width: int=50) -> str:
    """Proportional bar, one segment per block, at least one char each."""
    parts=[]
    for b in blocks:
        n=max(1, (b.size*width)//total)
        parts.append((FREE_CHAR if b.is_free else USED_CHAR)*n)
    return '[' + '|'.join(parts) + ']'


def render_table(blocks: Sequence[BlockView], total: int, available: int) -> str:
    lines: List[str]=[]
    lines.append(f"=== Memory state ({total} MB total, {available} MB available) ===")
    lines.append(f"{'Address':>9}  {'Size':>7}  {'Status':<9}  Process")
    lines.append("-"*62)
    for b in blocks:
        owner='-' if b.is_free else b.owner_name
        lines.append(f"{b.start_address:>6} MB  {b.size:>4} MB  {b.status.value:<9}  {owner}")
    lines.append("-"*62)
    return '\n'.join(lines)


def render_state(blocks: Sequence[BlockView], total: int, available: int, width: int=50) -> str:
    return '\n'.join([
        render_table(blocks, total, available),
        "",
        "Memory map:",
        render_map(blocks, total, width),
        f"Legend: [{FREE_CHAR}] = free, [{USED_CHAR}] = occupied",
    ])
