from __future__ import annotations
import subprocess
import sys
import re
from pathlib import Path

PY = sys.executable

SCENARIOS = [
    ("fixed", 2),
    ("fixed", 4),
    ("fixed", 8),
    ("dynamic", 0),
]

TRACE = str(Path("traces") / "workload.jsonl")

PATTERNS = {
    "available": re.compile(r"Available:\s+(\d+)"),
    "alloc_ok": re.compile(r"Allocs:\s+\d+ ok=(\d+)"),
    "alloc_fail": re.compile(r"Allocs:\s+\d+ ok=\d+ failed=(\d+)"),
    "compactions": re.compile(r"Compactions:\s+(\d+)"),
    "mb_moved": re.compile(r"MB moved:\s+(\d+)"),
    "internal": re.compile(r"Fragmentation: internal=(\d+)"),
    "external": re.compile(r"external=(\d+)"),
    "lfe": re.compile(r"LFE=(\d+)"),
    "holes": re.compile(r"holes=(\d+)"),
}

def run(mode: str, partitions: int, trace: str = TRACE) -> str:
    cmd = [PY, "run_sim.py", "--trace", trace, "--mode", mode]
    if mode == "fixed":
        cmd += ["--partitions", str(partitions)]
    out = subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True)
    return out

def parse(out: str):
    def get(key, default=0):
        m = PATTERNS[key].search(out)
        return int(m.group(1)) if m else default
    return {k: get(k) for k in PATTERNS}

def main():
    rows=[]
    for mode, partitions in SCENARIOS:
        out = run(mode, partitions)
        rows.append((mode, partitions, parse(out)))

    header = ["mode","parts","loaded","rejected","avail_MB","internal","external","LFE","holes","moved_MB"]
    print("="*96)
    print("Memory Partition Simulator - Benchmark Table (workload trace)")
    print("="*96)
    print("{:<8} {:>5} {:>7} {:>9} {:>9} {:>9} {:>9} {:>5} {:>6} {:>9}".format(*header))
    for mode, partitions, m in rows:
        print("{:<8} {:>5} {:>7} {:>9} {:>9} {:>9} {:>9} {:>5} {:>6} {:>9}".format(
            mode, partitions if mode == "fixed" else "-", m["alloc_ok"], m["alloc_fail"], m["available"],
            m["internal"], m["external"], m["lfe"], m["holes"], m["mb_moved"]
        ))
    print("="*96)
    print("Tip: replay a trace with --show-map for the memory map.")
    print("  python run_sim.py --trace traces/dynamic_holes.jsonl --show-map")

if __name__ == "__main__":
    main()
