"""
Partition Simulator - Occupancy Visualizer

Replays a JSONL trace and draws a Matplotlib heatmap of memory occupancy over
time. Rows are events, columns are binned addresses. Free memory is 0,
occupied memory is 1, and in fixed mode the unaddressed tail is drawn at 0.5.
Compactions are marked as horizontal lines.

How to run (from repo root):
    python -m tools.visualize_fragmentation --trace traces/dynamic_holes.jsonl --out out_occupancy.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script:
# (python -m tools.visualize_fragmentation already works without this,
#  but this makes `python tools/visualize_fragmentation.py ...` work too.)
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from control.config import DEFAULT_MEMORY_SIZE, SimConfig
from control.simulator import MemorySimulator
from control.trace import apply_event, load_trace, new_stats

UNADDRESSED = 0.5


def occupancy_row(sim: MemorySimulator, width: int) -> np.ndarray:
    """
    Return a 1D occupancy array over the address space, binned to 'width'.
    A bin is occupied if any occupied block touches it.
    """
    total = sim.total_memory
    row = np.zeros(width, dtype=np.float32)
    scale = total / width

    blocks = sim.snapshot()
    covered = blocks[-1].end if blocks else 0
    if covered < total:
        row[int(covered / scale):] = UNADDRESSED

    for blk in blocks:
        if blk.is_free:
            continue
        a = int(blk.start_address / scale)
        b = int((blk.end - 1) / scale)
        a = max(0, min(width - 1, a))
        b = max(0, min(width - 1, b))
        row[a : b + 1] = 1.0

    return row


def collect_frames(sim: MemorySimulator, trace: str, width: int, every: int = 1):
    frames: list[np.ndarray] = []
    compact_marks: list[int] = []
    stats = new_stats()
    for i, ev in enumerate(load_trace(trace), 1):
        ok = apply_event(sim, ev, stats)
        if ev.get("event") == "compact" and ok:
            compact_marks.append(len(frames))
        if every <= 1 or (i % every == 0):
            frames.append(occupancy_row(sim, width))
    return frames, compact_marks, stats


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--trace", required=True, help="Path to JSONL trace")
    ap.add_argument("--out", default="out_occupancy.png", help="Output image file")
    ap.add_argument("--memory", type=int, default=DEFAULT_MEMORY_SIZE, help="Total memory (MB)")
    ap.add_argument("--width", type=int, default=64, help="Heatmap width (bins)")
    ap.add_argument("--every", type=int, default=1, help="Record every N events")
    args = ap.parse_args(argv)

    trace_path = Path(args.trace)
    if not trace_path.exists():
        raise SystemExit(f"Trace not found: {trace_path}")

    sim = MemorySimulator(SimConfig(total_memory=args.memory))
    frames, compact_marks, _ = collect_frames(sim, str(trace_path), args.width, args.every)

    if not frames:
        raise SystemExit("No frames captured. Check trace path and --every.")

    H = np.stack(frames, axis=0)  # (time, width)

    fig = plt.figure(figsize=(10.5, 4.6))
    ax = fig.add_subplot(111)
    ax.imshow(H, aspect="auto", interpolation="nearest", vmin=0.0, vmax=1.0)
    ax.set_title(f"Memory Occupancy Heatmap ({sim.partition_type.value} partitions)")
    ax.set_xlabel("address (binned)")
    ax.set_ylabel("time (frames)")

    for t in compact_marks:
        ax.axhline(t, linewidth=1)

    m = sim.analyze_fragmentation()
    caption = (
        f"Final fragmentation: internal={m.internal} MB, external={m.external} MB, "
        f"LFE={m.largest_free} MB, holes={m.hole_count}"
    )
    fig.text(0.01, 0.01, caption, fontsize=9)

    fig.tight_layout()
    out_path = Path(args.out)
    fig.savefig(str(out_path), dpi=220)
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
