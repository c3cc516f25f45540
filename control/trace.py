"""JSONL trace replay.

One event per line:
    {"event": "mode", "mode": "fixed", "partitions": 4}
    {"event": "alloc", "id": "P1", "size": 10}
    {"event": "free", "id": "P1"}
    {"event": "frag"} | {"event": "compact"} | {"event": "show"}
"""
from __future__ import annotations
import json
import logging
from collections import Counter
from typing import Callable, Dict, Iterator, Optional

from control.simulator import MemorySimulator
from memory.errors import CorruptBlockList, SimulationError

logger = logging.getLogger(__name__)


def load_trace(path: str) -> Iterator[dict]:
    with open(path, 'r', encoding='utf-8') as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{lineno}: bad trace line: {e}") from e


def new_stats() -> Counter:
    return Counter({k: 0 for k in (
        'events', 'mode_changes', 'alloc_events', 'alloc_ok', 'alloc_fail',
        'free_events', 'free_fail', 'compact', 'compact_skipped', 'mb_moved',
        'unknown')})


class BadEvent(SimulationError):
    """A trace event is missing a field it needs."""


def _field(ev: dict, key: str):
    if ev.get(key) is None:
        raise BadEvent(f"{ev.get('event')!r} event needs a {key!r} field")
    return ev[key]


def apply_event(sim: MemorySimulator, ev: dict, stats: Counter,
                echo: Optional[Callable[[str], None]] = None) -> bool:
    """Apply one trace event. Returns False when the simulator rejected it."""
    say = echo or (lambda _msg: None)
    et = ev.get('event')
    stats['events'] += 1
    try:
        if et == 'mode':
            sim.establish_partition_mode(_field(ev, 'mode'), ev.get('partitions'))
            stats['mode_changes'] += 1
            say(f"mode: {sim.partition_type.value}")
        elif et == 'alloc':
            stats['alloc_events'] += 1
            block = sim.allocate(str(_field(ev, 'id')), ev.get('size'))
            stats['alloc_ok'] += 1
            say(f"loaded '{block.owner_name}' at {block.start_address} MB")
        elif et == 'free':
            stats['free_events'] += 1
            name = str(_field(ev, 'id'))
            sim.deallocate(name)
            say(f"freed '{name}'")
        elif et == 'frag':
            rep = sim.analyze_fragmentation()
            say(f"fragmentation: internal={rep.internal} MB external={rep.external} MB")
        elif et == 'compact':
            sim.compact()
            stats['compact'] += 1
            stats['mb_moved'] += sim.last_compaction_moved
            say(f"compacted, {sim.last_compaction_moved} MB moved")
        elif et == 'show':
            say('show')
        else:
            stats['unknown'] += 1
            logger.warning("skipping unknown trace event %r", et)
        return True
    except CorruptBlockList:
        raise
    except SimulationError as e:
        kind = type(e).__name__
        stats[f'err_{kind}'] += 1
        if et == 'alloc':
            stats['alloc_fail'] += 1
        elif et == 'free':
            stats['free_fail'] += 1
        elif et == 'compact':
            stats['compact_skipped'] += 1
        say(f"{kind}: {e}")
        return False


def error_counts(stats: Counter) -> Dict[str, int]:
    return {k[4:]: v for k, v in sorted(stats.items()) if k.startswith('err_')}
