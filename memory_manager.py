from collections import deque

from config import MAX_PROCESSES
from page_table import Process


class MemoryFault(Exception):
    """A condition that ends the simulation."""


class OutOfMemoryError(MemoryFault):
    pass


class InternalConsistencyError(MemoryFault):
    pass


class SlotPool:
    kind = "slot"

    def __init__(self, size):
        self.size = size
        # Each slot stores the Page placed there, or None if free
        self.slots = [None] * size
        self.free_count = size

    def find_free(self):
        for i, page in enumerate(self.slots):
            if page is None:
                return i
        return None

    def occupy(self, index, page):
        if self.slots[index] is not None:
            raise InternalConsistencyError(
                f"{self.kind} {index} is already occupied by {self.slots[index]!r}")
        self.slots[index] = page
        self.free_count -= 1

    def release(self, index):
        page = self.slots[index]
        if page is None:
            raise InternalConsistencyError(f"{self.kind} {index} is already free")
        self.slots[index] = None
        self.free_count += 1
        return page

    def page_at(self, index):
        return self.slots[index]

    @property
    def used_count(self):
        return self.size - self.free_count

    def utilization(self):
        if self.size == 0:
            return 0.0
        return self.used_count / self.size

    def is_full(self):
        return self.free_count == 0


class FramePool(SlotPool):
    kind = "frame"

    def find_free_frame(self):
        return self.find_free()


class SwapPool(SlotPool):
    kind = "swap slot"

    def find_free_slot(self):
        return self.find_free()


class FifoLedger:
    """Frame indices in load order, oldest at the head.

    Entries are never removed when a frame is freed by process termination;
    they go stale and are skipped when a victim is dequeued. Each entry
    remembers the page that was loaded, so an entry whose frame has since
    been reused by another page is stale as well.
    """

    def __init__(self, frames):
        self.frames = frames
        self.queue = deque()  # (frame_index, page)

    def enqueue(self, frame_index):
        self.queue.append((frame_index, self.frames.page_at(frame_index)))

    def _is_live(self, entry):
        frame_index, page = entry
        return page is not None and self.frames.page_at(frame_index) is page

    def dequeue_victim(self):
        while self.queue:
            entry = self.queue.popleft()
            if self._is_live(entry):
                return entry[0]
        return None

    def live_entries(self):
        return [frame_index for frame_index, page in self.queue
                if self._is_live((frame_index, page))]

    def tail(self):
        return self.queue[-1][0] if self.queue else None

    def __len__(self):
        return len(self.queue)


class Statistics:
    def __init__(self):
        self.accesses = 0
        self.hits = 0
        self.page_faults = 0
        self.fifo_replacements = 0
        self.loads_from_swap = 0
        self.evictions_to_swap = 0

    def record_hit(self):
        self.accesses += 1
        self.hits += 1

    def record_page_fault(self):
        self.accesses += 1
        self.page_faults += 1

    def record_replacement(self):
        # A FIFO replacement always sends the victim to swap
        self.fifo_replacements += 1
        self.evictions_to_swap += 1

    def record_load_from_swap(self):
        self.loads_from_swap += 1

    def __str__(self):
        return (f"Total page faults: {self.page_faults}\n"
                f"FIFO replacements: {self.fifo_replacements}\n"
                f"Pages loaded from swap: {self.loads_from_swap}\n"
                f"Pages evicted to swap: {self.evictions_to_swap}")


class Outcome:
    CREATED = "CREATED"
    TERMINATED = "TERMINATED"
    HIT = "HIT"
    FAULT = "FAULT"
    FATAL = "FATAL"
    IGNORED = "IGNORED"

    def __init__(self, kind, pid=None, page_number=None, frame_index=None,
                 victim=None, reason=None, in_ram=0, in_swap=0, address=None):
        self.kind = kind
        self.pid = pid
        self.page_number = page_number
        self.frame_index = frame_index
        self.victim = victim  # (pid, page_number, frame_index) of an evicted page
        self.reason = reason
        self.in_ram = in_ram
        self.in_swap = in_swap
        self.address = address

    @property
    def is_fatal(self):
        return self.kind == Outcome.FATAL

    def __repr__(self):
        return f"Outcome({self.kind}, pid={self.pid}, reason={self.reason!r})"


class MemoryManager:
    """Owns the frame pool, swap pool, FIFO ledger and process table.

    Every operation runs to completion. A MemoryFault raised while an
    operation mutates state ends the simulation instead of propagating:
    the manager latches into the terminated state and the operation
    returns a FATAL outcome. Once terminated, every operation is IGNORED.
    """

    def __init__(self, layout, max_processes=MAX_PROCESSES):
        self.layout = layout
        self.page_size = layout.page_size
        self.max_processes = max_processes

        self.frames = FramePool(layout.frame_count)
        self.swap = SwapPool(layout.swap_slot_count)
        self.fifo = FifoLedger(self.frames)

        self.processes = {}  # pid -> Process, finished ones included
        self.live = {}       # pid -> Process, in creation order
        self.next_pid = 1

        self.stats = Statistics()
        self.running = True
        self.end_reason = None

    # -----------------------------
    # Accounting
    # -----------------------------
    @property
    def free_ram_frames(self):
        return self.frames.free_count

    @property
    def free_swap_slots(self):
        return self.swap.free_count

    @property
    def process_count(self):
        return len(self.processes)

    @property
    def alive_count(self):
        return len(self.live)

    @property
    def finished_count(self):
        return self.process_count - self.alive_count

    def live_pids(self):
        return list(self.live)

    def get_process(self, pid):
        return self.processes.get(pid)

    def snapshot(self):
        return {
            "free_ram_frames": self.free_ram_frames,
            "free_swap_slots": self.free_swap_slots,
            "alive": self.alive_count,
            "created": self.process_count,
            "page_faults": self.stats.page_faults,
            "fifo_replacements": self.stats.fifo_replacements,
            "running": self.running,
        }

    # -----------------------------
    # Simulation state
    # -----------------------------
    def end_simulation(self, reason):
        if not self.running:
            return False
        self.running = False
        self.end_reason = reason
        return True

    def _fatal(self, error, pid=None):
        self.end_simulation(str(error))
        return Outcome(Outcome.FATAL, pid=pid, reason=self.end_reason)

    def _ignored(self, reason, pid=None):
        return Outcome(Outcome.IGNORED, pid=pid, reason=reason)

    # -----------------------------
    # Page placement helpers
    # -----------------------------
    def _load(self, page, frame_index):
        self.frames.occupy(frame_index, page)
        page.place_in_ram(frame_index)
        self.fifo.enqueue(frame_index)

    def _store(self, page, slot_index):
        self.swap.occupy(slot_index, page)
        page.place_in_swap(slot_index)

    def _release_page(self, page):
        if page.in_ram:
            released = self.frames.release(page.frame_index)
        elif page.in_swap:
            released = self.swap.release(page.swap_index)
        else:
            return
        if released is not page:
            raise InternalConsistencyError(
                f"{page!r} points at a slot holding {released!r}")
        page.clear()

    # -----------------------------
    # Process creation
    # -----------------------------
    def create_process(self, size_bytes):
        if not self.running:
            return self._ignored("simulation terminated")
        if self.process_count >= self.max_processes:
            return self._ignored("process table full")
        if size_bytes <= 0:
            return self._ignored(f"invalid process size {size_bytes}")

        process = Process(self.next_pid, size_bytes, self.page_size)
        self.next_pid += 1

        try:
            for page in process.pages:
                frame_index = self.frames.find_free_frame()
                if frame_index is not None:
                    self._load(page, frame_index)
                    continue
                slot_index = self.swap.find_free_slot()
                if slot_index is None:
                    raise OutOfMemoryError("insufficient memory to create process")
                self._store(page, slot_index)
        except MemoryFault as e:
            # Pages placed so far stay where they are; the process is never registered
            return self._fatal(e, pid=process.pid)

        self.processes[process.pid] = process
        self.live[process.pid] = process

        return Outcome(Outcome.CREATED, pid=process.pid,
                       in_ram=len(process.resident_pages()),
                       in_swap=len(process.swapped_pages()))

    # -----------------------------
    # Process termination
    # -----------------------------
    def terminate_process(self, pid):
        if not self.running:
            return self._ignored("simulation terminated", pid)
        process = self.processes.get(pid)
        if process is None:
            return self._ignored("unknown process", pid)
        if not process.alive:
            return self._ignored("process already terminated", pid)

        in_ram = len(process.resident_pages())
        in_swap = len(process.swapped_pages())
        try:
            for page in process.pages:
                self._release_page(page)
        except MemoryFault as e:
            return self._fatal(e, pid=pid)

        process.terminate()
        del self.live[pid]
        return Outcome(Outcome.TERMINATED, pid=pid, in_ram=in_ram, in_swap=in_swap)

    # -----------------------------
    # Memory access and page faults
    # -----------------------------
    def access(self, pid, address):
        if not self.running:
            return self._ignored("simulation terminated", pid)
        process = self.processes.get(pid)
        if process is None:
            return self._ignored("unknown process", pid)
        if not process.alive:
            return self._ignored("process is terminated", pid)
        try:
            page = process.page_for_address(address)
        except IndexError as e:
            return self._ignored(str(e), pid)

        if page.in_ram:
            self.stats.record_hit()
            return Outcome(Outcome.HIT, pid=pid, page_number=page.page_number,
                           frame_index=page.frame_index, address=address)

        self.stats.record_page_fault()
        try:
            victim = self._handle_page_fault(page)
        except MemoryFault as e:
            return self._fatal(e, pid=pid)

        return Outcome(Outcome.FAULT, pid=pid, page_number=page.page_number,
                       frame_index=page.frame_index, victim=victim, address=address)

    def _handle_page_fault(self, page):
        # Only a page that was never placed lacks a swap slot
        if not page.in_swap:
            slot_index = self.swap.find_free_slot()
            if slot_index is None:
                raise OutOfMemoryError("no swap space for page fault")
            self._store(page, slot_index)

        victim = None
        frame_index = self.frames.find_free_frame()
        if frame_index is None:
            frame_index = self.fifo.dequeue_victim()
            if frame_index is None:
                raise InternalConsistencyError("FIFO ledger has no victim frame")
            victim_page = self.frames.page_at(frame_index)

            # The faulting page leaves swap before the victim needs a slot there
            self._release_page(page)
            slot_index = self.swap.find_free_slot()
            if slot_index is None:
                raise OutOfMemoryError("no swap space for FIFO victim")
            self.frames.release(frame_index)
            self._store(victim_page, slot_index)
            self.stats.record_replacement()
            victim = (victim_page.pid, victim_page.page_number, frame_index)
        else:
            self._release_page(page)

        self._load(page, frame_index)
        self.stats.record_load_from_swap()
        return victim

    # -----------------------------
    # Invariants
    # -----------------------------
    def check_invariants(self):
        for pool in (self.frames, self.swap):
            occupied = sum(1 for page in pool.slots if page is not None)
            if occupied + pool.free_count != pool.size:
                raise InternalConsistencyError(
                    f"{pool.kind} pool counts {pool.free_count} free but "
                    f"{pool.size - occupied} slots are empty")

        for index, page in enumerate(self.frames.slots):
            if page is not None and page.frame_index != index:
                raise InternalConsistencyError(f"frame {index} holds {page!r}")
        for index, page in enumerate(self.swap.slots):
            if page is not None and page.swap_index != index:
                raise InternalConsistencyError(f"swap slot {index} holds {page!r}")

        live_frames = self.fifo.live_entries()
        if len(live_frames) > self.frames.size:
            raise InternalConsistencyError(
                f"FIFO ledger holds {len(live_frames)} live entries for "
                f"{self.frames.size} frames")
        queued = set(live_frames)

        for process in self.processes.values():
            for page in process.pages:
                if page.in_ram and page.in_swap:
                    raise InternalConsistencyError(f"{page!r} is in RAM and swap")
                if not process.alive:
                    if page.location() is not None:
                        raise InternalConsistencyError(
                            f"{page!r} of a terminated process still holds memory")
                    continue
                if page.in_ram:
                    if self.frames.page_at(page.frame_index) is not page:
                        raise InternalConsistencyError(f"{page!r} not in its frame")
                    if page.frame_index not in queued:
                        raise InternalConsistencyError(
                            f"{page!r} is resident but missing from the FIFO ledger")
                elif page.in_swap:
                    if self.swap.page_at(page.swap_index) is not page:
                        raise InternalConsistencyError(f"{page!r} not in its swap slot")
                else:
                    raise InternalConsistencyError(f"{page!r} has no location")
