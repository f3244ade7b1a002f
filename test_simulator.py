import random

import pytest

from config import MB, MemoryLayout
from memory_manager import MemoryManager, Outcome
from simulator import PagingSimulator, describe, format_report, main


def make_simulator(physical_mb, page_mb, size_range_mb, seed=0, max_processes=1000):
    layout = MemoryLayout(physical_mb * MB, page_mb * MB, 2.0)
    manager = MemoryManager(layout, max_processes=max_processes)
    lines = []
    simulator = PagingSimulator(manager, random.Random(seed), size_range_mb, out=lines.append)
    return simulator, lines


class TestDescribe:
    def test_created(self):
        line = describe(Outcome(Outcome.CREATED, pid=3, in_ram=2, in_swap=1), elapsed=4)
        assert line == "[t=4s] [CREATE] PID=3 pages in RAM: 2, pages in swap: 1"

    def test_fault_with_victim(self):
        outcome = Outcome(Outcome.FAULT, pid=1, page_number=1, frame_index=0,
                          victim=(2, 5, 0), address=4096)
        text = describe(outcome)
        assert "PAGE FAULT" in text
        assert "FIFO victim PID=2 page=5 frame=0" in text
        assert text.endswith("page loaded into frame=0")

    def test_hit(self):
        outcome = Outcome(Outcome.HIT, pid=1, page_number=0, frame_index=3, address=10)
        assert "already in RAM (frame=3)" in describe(outcome)

    def test_fatal(self):
        assert describe(Outcome(Outcome.FATAL, reason="boom")) == "[FATAL] boom"


class TestFormatReport:
    def test_counts_and_usage(self):
        manager = MemoryManager(MemoryLayout(1000, 4096, 2.0))
        report = format_report(manager)
        assert "Total page faults: 0" in report
        assert "Total frames: 0" in report
        assert "Usage: 0.00%" in report
        assert "Processes created: 0" in report

    def test_usage_percent(self):
        manager = MemoryManager(MemoryLayout(4 * 4096, 4096, 2.0))
        manager.create_process(4096)
        assert "Usage: 25.00%" in format_report(manager)


class TestPagingSimulator:
    def test_processes_arrive_every_two_ticks(self):
        simulator, lines = make_simulator(64, 1, (1, 1))
        simulator.run(max_ticks=10)

        manager = simulator.manager
        assert manager.process_count == 5
        assert manager.alive_count == 5
        assert manager.stats.accesses == 0
        assert len(simulator.history) == 10
        assert simulator.history[-1]["created"] == 5
        assert sum("[CREATE]" in line for line in lines) == 5

    def test_exits_and_accesses_start_after_warmup(self):
        simulator, lines = make_simulator(64, 1, (1, 1))
        for _ in range(29):
            simulator.tick()
        assert simulator.manager.finished_count == 0

        simulator.tick()
        assert simulator.manager.finished_count == 1
        assert simulator.manager.stats.accesses == 1
        assert any("[EXIT]" in line for line in lines)

    def test_ends_when_memory_is_exhausted(self):
        simulator, lines = make_simulator(4, 1, (1, 1))
        simulator.run()

        manager = simulator.manager
        assert not manager.running
        assert manager.end_reason == "no memory left in RAM or swap"
        assert simulator.elapsed == 16
        assert manager.process_count == 8
        assert lines.count("\n*** END OF SIMULATION ***") == 1

    def test_out_of_memory_on_creation(self):
        simulator, lines = make_simulator(4, 1, (3, 3))
        stats = simulator.run()

        manager = simulator.manager
        assert manager.end_reason == "insufficient memory to create process"
        assert simulator.elapsed == 6
        assert stats is manager.stats
        assert any(line.startswith("[t=6s] [FATAL]") for line in lines)
        assert lines.count("\n*** END OF SIMULATION ***") == 1
        assert any("SIMULATION STATISTICS" in line for line in lines)

    def test_ends_when_process_table_is_exhausted(self):
        simulator, _ = make_simulator(64, 1, (1, 1), max_processes=1)
        simulator.run()

        assert simulator.manager.end_reason == "process table exhausted"
        assert simulator.elapsed == 30

    def test_max_ticks(self):
        simulator, _ = make_simulator(64, 1, (1, 2))
        simulator.run(max_ticks=3)
        assert simulator.elapsed == 3
        assert simulator.manager.running

    def test_same_seed_same_run(self):
        first, first_lines = make_simulator(8, 1, (1, 3), seed=11)
        second, second_lines = make_simulator(8, 1, (1, 3), seed=11)
        first.run(max_ticks=200)
        second.run(max_ticks=200)
        assert first_lines == second_lines


class TestMain:
    def test_runs_from_arguments(self, capsys):
        code = main(["--physical-mb", "4", "--page-kb", "1024", "--seed", "3",
                     "--multiplier", "2.0"])
        assert code == 0
        out = capsys.readouterr().out
        assert "RAM frames: 4" in out
        assert "Swap slots: 4" in out
        assert "SIMULATION STATISTICS" in out
        assert "Simulation finished." in out

    def test_prompts_for_missing_sizes(self, capsys):
        answers = iter(["4", "1024"])
        code = main(["--seed", "1", "--multiplier", "2.0", "--ticks", "4"],
                    read=lambda prompt: next(answers))
        assert code == 0
        assert "RAM frames: 4" in capsys.readouterr().out

    @pytest.mark.parametrize("argv, answers", [
        (["--physical-mb", "0", "--page-kb", "4"], []),
        (["--page-kb", "4"], ["lots"]),
        (["--physical-mb", "4", "--page-kb", "1024", "--multiplier", "nan", "--ticks", "2"], []),
        (["--physical-mb", "4", "--page-kb", "1024", "--multiplier", "inf", "--ticks", "2"], []),
    ])
    def test_invalid_configuration(self, capsys, argv, answers):
        answers = iter(answers)
        assert main(argv, read=lambda prompt: next(answers)) == 1
        assert "Error:" in capsys.readouterr().err
