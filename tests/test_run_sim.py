"""Tests for the command-line runner, trace replay and text rendering."""

from pathlib import Path

import pytest

import bench
import run_sim
from conftest import TOTAL, layout
from control.trace import apply_event, error_counts, load_trace, new_stats
from memory.errors import CorruptBlockList
from viz.ascii_map import render_map, render_table

TRACES = Path(__file__).resolve().parents[1] / "traces"


def feeder(*answers):
    it = iter(answers)

    def read(_prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read


class TestRenderMap:
    def test_proportional_segments(self, holes_sim):
        holes_sim.compact()
        bar = render_map(holes_sim.snapshot(), TOTAL, 50)
        assert bar == "[" + "#" * 7 + "|" + "#" * 7 + "|" + "." * 34 + "]"

    def test_tiny_blocks_get_one_char(self, sim):
        sim.allocate("x", 1)
        assert render_map(sim.snapshot(), TOTAL, 50).startswith("[#|")

    def test_table_lists_every_block(self, holes_sim):
        table = render_table(holes_sim.snapshot(), TOTAL, holes_sim.available_memory)
        assert "(64 MB total, 44 MB available)" in table
        assert sum(1 for line in table.splitlines() if " MB " in line and "===" not in line) == 4


class TestTrace:
    def test_load_skips_comments_and_blanks(self, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text('# note\n\n{"event": "frag"}\n', encoding="utf-8")
        assert list(load_trace(str(path))) == [{"event": "frag"}]

    def test_bad_line_reports_location(self, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text('{"event": "frag"}\nnot json\n', encoding="utf-8")
        with pytest.raises(ValueError, match="t.jsonl:2"):
            list(load_trace(str(path)))

    def test_rejected_events_are_counted(self, sim):
        stats = new_stats()
        assert apply_event(sim, {"event": "alloc", "id": "P1", "size": 0}, stats) is False
        assert apply_event(sim, {"event": "free", "id": "P1"}, stats) is False
        assert apply_event(sim, {"event": "teleport"}, stats) is True
        assert stats["alloc_fail"] == 1 and stats["free_fail"] == 1 and stats["unknown"] == 1
        assert error_counts(stats) == {"InvalidSize": 1, "NotFound": 1}

    def test_fractional_size_is_rejected(self, sim):
        stats = new_stats()
        assert apply_event(sim, {"event": "alloc", "id": "P", "size": 2.9}, stats) is False
        assert error_counts(stats) == {"InvalidSize": 1}
        assert layout(sim) == [(0, TOTAL, "FREE", "")]

    def test_non_numeric_size_is_rejected(self, sim):
        stats = new_stats()
        assert apply_event(sim, {"event": "alloc", "id": "P", "size": "ten"}, stats) is False
        assert stats["alloc_fail"] == 1
        assert error_counts(stats) == {"InvalidSize": 1}

    @pytest.mark.parametrize("ev", [
        {"event": "free"},
        {"event": "alloc", "size": 4},
        {"event": "mode", "partitions": 4},
    ])
    def test_missing_field_is_a_rejected_event(self, sim, ev):
        stats = new_stats()
        assert apply_event(sim, ev, stats) is False
        assert error_counts(stats) == {"BadEvent": 1}
        assert sim.available_memory == TOTAL

    def test_string_partition_count_is_rejected(self, sim):
        stats = new_stats()
        assert apply_event(sim, {"event": "mode", "mode": "fixed", "partitions": "4"}, stats) is False
        assert error_counts(stats) == {"InvalidConfiguration": 1}

    def test_malformed_events_do_not_stop_replay(self, sim, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text(
            '{"event": "alloc", "id": "A", "size": "ten"}\n'
            '{"event": "free"}\n'
            '{"event": "alloc", "id": "B", "size": 8}\n', encoding="utf-8")
        stats = run_sim.replay(sim, str(path), write=lambda _s: None)
        assert stats["alloc_ok"] == 1 and stats["alloc_fail"] == 1 and stats["free_fail"] == 1
        assert layout(sim)[0] == (0, 8, "OCCUPIED", "B")

    def test_corruption_is_not_swallowed(self, sim):
        sim._layout.blocks[0].size = 10
        with pytest.raises(CorruptBlockList):
            apply_event(sim, {"event": "alloc", "id": "P1", "size": 2}, new_stats())

    def test_dynamic_holes_trace(self, sim):
        lines = []
        stats = run_sim.replay(sim, str(TRACES / "dynamic_holes.jsonl"), write=lines.append)
        assert layout(sim) == [
            (0, 10, "OCCUPIED", "A"),
            (10, 10, "OCCUPIED", "B"),
            (20, 44, "FREE", ""),
        ]
        assert stats["compact"] == 1 and stats["mb_moved"] == 10
        assert sum("Memory map:" in line for line in lines) == 2

    def test_fixed_partitions_trace(self, sim):
        stats = run_sim.replay(sim, str(TRACES / "fixed_partitions.jsonl"), write=lambda _s: None)
        assert stats["alloc_ok"] == 2 and stats["alloc_fail"] == 1
        assert stats["compact_skipped"] == 1
        assert error_counts(stats) == {"NoSuitableBlock": 1, "NotApplicable": 1}
        assert sim.available_memory == TOTAL - 16


class TestSummary:
    def test_summary_is_parseable_by_bench(self, holes_sim):
        lines = []
        run_sim.summary(holes_sim, new_stats(), write=lines.append)
        out = "\n".join(lines)
        assert "Fragmentation: internal=0 external=44 LFE=39 holes=2" in out
        m = bench.parse(out)
        assert (m["available"], m["internal"], m["external"], m["lfe"], m["holes"]) == (44, 0, 44, 39, 2)


class TestInteractive:
    def test_menu_session(self, sim):
        out = []
        run_sim.interactive(sim, read=feeder("1", "1", "4", "2", "P1", "10", "4", "5", "0"),
                            write=out.append)
        text = "\n".join(out)
        assert "Fixed mode: 4 partitions of 16 MB." in text
        assert "Process 'P1' loaded." in text
        assert "- internal: 5 MB" in text
        assert "Error: compaction only applies to dynamic partitions" in text
        assert text.endswith("Simulator finished.")

    def test_bad_input_is_reported(self, sim):
        out = []
        run_sim.interactive(sim, read=feeder("2", "P1", "lots", "3", "ghost", "9"), write=out.append)
        text = "\n".join(out)
        assert "Error: process size must be an integer" in text
        assert "Error: no process named 'ghost' is loaded" in text
        assert "Invalid option." in text
        assert sim.available_memory == TOTAL

    def test_dynamic_session_with_free(self, sim):
        out = []
        run_sim.interactive(sim, read=feeder("1", "2", "2", "A", "20", "3", "A", "6"),
                            write=out.append)
        assert "Process 'A' freed." in "\n".join(out)
        assert layout(sim) == [(0, TOTAL, "FREE", "")]

    def test_free_message_uses_stored_label(self, sim):
        out = []
        long_name = "process-with-a-long-name"
        run_sim.interactive(sim, read=feeder("2", long_name, "4", "3", long_name), write=out.append)
        text = "\n".join(out)
        assert f"Process '{long_name[:19]}' loaded." in text
        assert f"Process '{long_name[:19]}' freed." in text


class TestMain:
    def test_trace_run(self, capsys):
        assert run_sim.main(["--trace", str(TRACES / "dynamic_holes.jsonl"), "--show-map"]) == 0
        out = capsys.readouterr().out
        assert "Memory Partition Simulator - Summary" in out
        assert "Compactions: 1 skipped=0  MB moved: 10" in out

    def test_fixed_start_mode(self, capsys):
        run_sim.main(["--trace", str(TRACES / "workload.jsonl"), "--mode", "fixed", "--partitions", "4"])
        assert "Mode: fixed (4 x 16 MB, 0 MB unaddressed)" in capsys.readouterr().out

    def test_missing_trace(self, tmp_path):
        with pytest.raises(SystemExit, match="Trace not found"):
            run_sim.main(["--trace", str(tmp_path / "nope.jsonl")])

    def test_bad_partition_count(self):
        with pytest.raises(SystemExit, match="partition count"):
            run_sim.main(["--trace", str(TRACES / "workload.jsonl"), "--mode", "fixed", "--partitions", "0"])

    def test_bad_memory_size(self):
        with pytest.raises(SystemExit, match="total_memory"):
            run_sim.main(["--trace", str(TRACES / "workload.jsonl"), "--memory", "0"])
