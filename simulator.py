import argparse
import random
import sys
import time

from config import (ACCESS_INTERVAL, CREATE_INTERVAL, MAX_PROC_MB, MB, MIN_PROC_MB,
                    TERMINATE_INTERVAL, WARMUP_TICKS, InvalidConfigurationError,
                    MemoryLayout, random_multiplier)
from memory_manager import MemoryManager, Outcome


def describe(outcome, elapsed=None):
    stamp = f"[t={elapsed}s] " if elapsed is not None else ""
    kind = outcome.kind

    if kind == Outcome.CREATED:
        return (f"{stamp}[CREATE] PID={outcome.pid} "
                f"pages in RAM: {outcome.in_ram}, pages in swap: {outcome.in_swap}")
    if kind == Outcome.TERMINATED:
        return (f"{stamp}[EXIT] PID={outcome.pid} finished, released "
                f"{outcome.in_ram} frames and {outcome.in_swap} swap slots")
    if kind == Outcome.HIT:
        return (f"{stamp}[ACCESS] PID={outcome.pid} addr={outcome.address} "
                f"(page={outcome.page_number}) -> already in RAM (frame={outcome.frame_index})")
    if kind == Outcome.FAULT:
        line = (f"{stamp}[ACCESS] PID={outcome.pid} addr={outcome.address} "
                f"(page={outcome.page_number}) -> PAGE FAULT")
        if outcome.victim is not None:
            victim_pid, victim_page, victim_frame = outcome.victim
            line += (f"\n    -> FIFO victim PID={victim_pid} page={victim_page} "
                     f"frame={victim_frame}")
        return line + f"\n    -> page loaded into frame={outcome.frame_index}"
    if kind == Outcome.FATAL:
        return f"{stamp}[FATAL] {outcome.reason}"
    return f"{stamp}[SKIP] PID={outcome.pid}: {outcome.reason}"


def format_report(manager):
    frames = manager.frames
    swap = manager.swap
    return (f"\n===== SIMULATION STATISTICS =====\n"
            f"\n--- Page faults ---\n"
            f"{manager.stats}\n"
            f"\n--- RAM ---\n"
            f"Total frames: {frames.size}\n"
            f"Free frames: {frames.free_count}\n"
            f"Usage: {100.0 * frames.utilization():.2f}%\n"
            f"\n--- Swap ---\n"
            f"Total slots: {swap.size}\n"
            f"Free slots: {swap.free_count}\n"
            f"Usage: {100.0 * swap.utilization():.2f}%\n"
            f"\n--- Processes ---\n"
            f"Processes created: {manager.process_count}\n"
            f"Processes alive: {manager.alive_count}\n"
            f"Processes finished: {manager.finished_count}\n"
            f"=================================\n")


class PagingSimulator:
    """Drives a MemoryManager on a fixed schedule of logical seconds.

    A process arrives every CREATE_INTERVAL ticks. After WARMUP_TICKS, a
    random live process exits every TERMINATE_INTERVAL ticks and a random
    address of a random live process is touched every ACCESS_INTERVAL ticks.
    """

    def __init__(self, manager, rng=None, size_range_mb=(MIN_PROC_MB, MAX_PROC_MB), out=print):
        self.manager = manager
        self.rng = rng if rng is not None else random.Random()
        self.size_range_mb = size_range_mb
        self.out = out
        self.elapsed = 0
        self.history = []
        self._end_reported = False

    def _report(self, outcome):
        if outcome.kind == Outcome.IGNORED:
            return
        self.out(describe(outcome, self.elapsed))
        if outcome.is_fatal:
            self._report_end()

    def _report_end(self):
        if self._end_reported:
            return
        self._end_reported = True
        self.out("\n*** END OF SIMULATION ***")
        self.out(f"Reason: {self.manager.end_reason}\n")

    def random_process_size(self):
        low, high = self.size_range_mb
        return self.rng.randint(low, high) * MB

    def create_random_process(self):
        outcome = self.manager.create_process(self.random_process_size())
        self._report(outcome)
        return outcome

    def terminate_random_process(self):
        pids = self.manager.live_pids()
        if not pids:
            return None
        outcome = self.manager.terminate_process(self.rng.choice(pids))
        self._report(outcome)
        return outcome

    def access_random_address(self):
        pids = self.manager.live_pids()
        if not pids:
            return None
        process = self.manager.get_process(self.rng.choice(pids))
        address = self.rng.randrange(process.size_bytes)
        outcome = self.manager.access(process.pid, address)
        self._report(outcome)
        return outcome

    def tick(self):
        self.elapsed += 1
        manager = self.manager

        if self.elapsed % CREATE_INTERVAL == 0:
            self.create_random_process()

        if self.elapsed >= WARMUP_TICKS:
            if self.elapsed % TERMINATE_INTERVAL == 0:
                self.terminate_random_process()
            if self.elapsed % ACCESS_INTERVAL == 0:
                self.access_random_address()

        if manager.running and manager.frames.is_full() and manager.swap.is_full():
            manager.end_simulation("no memory left in RAM or swap")
            self._report_end()
        elif (manager.running and manager.alive_count == 0
              and manager.process_count >= manager.max_processes):
            manager.end_simulation("process table exhausted")
            self._report_end()

        self.history.append(dict(manager.snapshot(), tick=self.elapsed))
        return manager.running

    def run(self, max_ticks=None, tick_seconds=0.0):
        self.out("Starting simulation...")
        while self.manager.running:
            if max_ticks is not None and self.elapsed >= max_ticks:
                break
            self.tick()
            if tick_seconds:
                time.sleep(tick_seconds)

        self.out(format_report(self.manager))
        return self.manager.stats


def prompt_int(prompt, read=input):
    raw = read(prompt)
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfigurationError(f"invalid integer input: {raw!r}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="FIFO paging simulator with RAM and swap")
    parser.add_argument("--physical-mb", type=int, help="physical memory size in MB (prompted if omitted)")
    parser.add_argument("--page-kb", type=int, help="page size in KB (prompted if omitted)")
    parser.add_argument("--seed", type=int, help="seed for the random source")
    parser.add_argument("--multiplier", type=float,
                        help="virtual memory multiplier (random in [1.5, 4.5) if omitted)")
    parser.add_argument("--ticks", type=int, help="stop after this many simulated seconds")
    parser.add_argument("--tick-seconds", type=float, default=0.0,
                        help="real seconds to sleep per simulated second")
    parser.add_argument("--plot", metavar="PATH", help="save a resource usage graph to PATH")
    return parser.parse_args(argv)


def main(argv=None, read=input):
    args = parse_args(argv)
    rng = random.Random(args.seed)

    print("=== Paging simulator (FIFO) ===")
    try:
        physical_mb = args.physical_mb
        if physical_mb is None:
            physical_mb = prompt_int("Physical memory size (MB): ", read)
        page_kb = args.page_kb
        if page_kb is None:
            page_kb = prompt_int("Page size (KB): ", read)
        multiplier = args.multiplier if args.multiplier is not None else random_multiplier(rng)
        layout = MemoryLayout.from_units(physical_mb, page_kb, multiplier)
    except InvalidConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\nInitial configuration:\n{layout}\n")

    simulator = PagingSimulator(MemoryManager(layout), rng)
    simulator.run(max_ticks=args.ticks, tick_seconds=args.tick_seconds)

    if args.plot:
        from generate_graphs import plot_history
        plot_history(simulator.history, args.plot)
        print(f"Graph saved as '{args.plot}'")

    print("Simulation finished.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
