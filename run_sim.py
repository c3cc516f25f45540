from __future__ import annotations
import argparse, logging, sys
from typing import Callable, Optional

from control.config import DEFAULT_MEMORY_SIZE, SimConfig
from control.simulator import MemorySimulator
from control.trace import apply_event, error_counts, load_trace, new_stats
from memory.block import owner_label
from memory.errors import CorruptBlockList, SimulationError
from viz.ascii_map import render_state

MENU = """
=== Memory Partition Simulator ===
1. Set partition mode
2. Load process
3. Free process
4. Fragmentation
5. Compact memory
6. Show memory
0. Exit"""


def show(sim: MemorySimulator, write: Callable[[str], None]=print):
    write(render_state(sim.snapshot(), sim.total_memory, sim.available_memory, sim.config.bar_width))


def _ask_int(read: Callable[[str], str], prompt: str) -> Optional[int]:
    raw=read(prompt).strip()
    try:
        return int(raw)
    except ValueError:
        return None


def interactive(sim: MemorySimulator, read: Callable[[str], str]=input,
                write: Callable[[str], None]=print):
    """Menu loop. Rejected operations are reported and the loop carries on."""
    while True:
        write(MENU)
        try:
            choice=_ask_int(read, "\nOption: ")
        except EOFError:
            break
        if choice==0:
            break
        try:
            if choice==1:
                kind=_ask_int(read, "1. Fixed partitions\n2. Dynamic partitions\nOption: ")
                if kind==1:
                    count=_ask_int(read, "Number of fixed partitions: ")
                    sim.establish_partition_mode('fixed', count)
                    write(f"Fixed mode: {sim.fixed_partition_count} partitions of {sim.fixed_partition_size} MB.")
                elif kind==2:
                    sim.establish_partition_mode('dynamic')
                    write("Dynamic mode.")
                else:
                    write("Invalid option.")
            elif choice==2:
                name=read("Process name: ").strip()
                size=_ask_int(read, "Process size (MB): ")
                block=sim.allocate(name, size)
                write(f"Process '{block.owner_name}' loaded.")
                show(sim, write)
            elif choice==3:
                name=read("Process to free: ").strip()
                sim.deallocate(name)
                write(f"Process '{owner_label(name, sim.config.max_owner_name)}' freed.")
                show(sim, write)
            elif choice==4:
                rep=sim.analyze_fragmentation()
                write(f"Fragmentation:\n- internal: {rep.internal} MB\n- external: {rep.external} MB")
            elif choice==5:
                write("Before compaction:")
                show(sim, write)
                sim.compact()
                write("After compaction:")
                show(sim, write)
            elif choice==6:
                show(sim, write)
            else:
                write("Invalid option.")
        except CorruptBlockList:
            raise
        except SimulationError as e:
            write(f"Error: {e}")
        except EOFError:
            break
    write("Simulator finished.")


def replay(sim: MemorySimulator, path: str, show_steps: bool=False,
           write: Callable[[str], None]=print):
    stats=new_stats()
    for ev in load_trace(path):
        apply_event(sim, ev, stats, echo=write if show_steps else None)
        if ev.get('event')=='show':
            show(sim, write)
    return stats


def summary(sim: MemorySimulator, stats, show_map: bool=False, write: Callable[[str], None]=print):
    m=sim.analyze_fragmentation()
    write("="*72)
    write("Memory Partition Simulator - Summary")
    write("="*72)
    mode=sim.partition_type.value
    if mode=='fixed':
        mode+=f" ({sim.fixed_partition_count} x {sim.fixed_partition_size} MB, {sim.unaddressed_memory} MB unaddressed)"
    write(f"Mode: {mode}   Total: {sim.total_memory} MB  Available: {sim.available_memory} MB")
    write(f"Events: {stats['events']}  Mode changes: {stats['mode_changes']}  Unknown: {stats['unknown']}")
    write(f"Allocs: {stats['alloc_events']} ok={stats['alloc_ok']} failed={stats['alloc_fail']}  "
          f"Frees: {stats['free_events']} failed={stats['free_fail']}")
    write(f"Compactions: {stats['compact']} skipped={stats['compact_skipped']}  MB moved: {stats['mb_moved']}")
    errs=error_counts(stats)
    if errs:
        write("Rejected: " + ' '.join(f"{k}={v}" for k,v in errs.items()))
    write("-"*72)
    write(f"Fragmentation: internal={m.internal} external={m.external} LFE={m.largest_free} holes={m.hole_count}")
    if show_map:
        write("-"*72)
        show(sim, write)
    write("="*72)


def main(argv=None):
    ap=argparse.ArgumentParser(description="Fixed/dynamic memory partitioning simulator")
    src=ap.add_mutually_exclusive_group()
    src.add_argument('--trace', help="JSONL trace to replay")
    src.add_argument('--interactive', action='store_true', help="menu-driven session (default without --trace)")
    ap.add_argument('--memory', type=int, default=DEFAULT_MEMORY_SIZE, help="total memory in MB")
    ap.add_argument('--mode', choices=['fixed','dynamic'], default='dynamic', help="initial partition mode")
    ap.add_argument('--partitions', type=int, default=4, help="partition count for --mode fixed")
    ap.add_argument('--bar-width', type=int, default=50)
    ap.add_argument('--show-map', action='store_true')
    ap.add_argument('--verbose', action='store_true', help="echo each trace event")
    ap.add_argument('--log-level', default='WARNING',
                    choices=['DEBUG','INFO','WARNING','ERROR'])
    args=ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        sim=MemorySimulator(SimConfig(total_memory=args.memory, bar_width=args.bar_width))
        if args.mode=='fixed':
            sim.establish_partition_mode('fixed', args.partitions)
    except (ValueError, SimulationError) as e:
        raise SystemExit(f"error: {e}")

    if args.trace:
        try:
            stats=replay(sim, args.trace, show_steps=args.verbose)
        except FileNotFoundError:
            raise SystemExit(f"Trace not found: {args.trace}")
        summary(sim, stats, show_map=args.show_map)
    else:
        print(f"Simulator started with {sim.total_memory} MB of memory.")
        interactive(sim)
    return 0

if __name__=='__main__':
    sys.exit(main())
