import random

import pytest

from config import MemoryLayout
from memory_manager import MemoryManager
from simulator import PagingSimulator


@pytest.mark.parametrize("seed", [0, 7, 42])
def test_small(seed):
    # 16 frames and 24 swap slots of 1 MB, processes of 1-4 MB
    manager = MemoryManager(MemoryLayout.from_units(16, 1024, 2.5))
    simulator = PagingSimulator(manager, random.Random(seed), size_range_mb=(1, 4),
                                out=lambda line: None)

    while manager.running and simulator.elapsed < 500:
        simulator.tick()
        manager.check_invariants()

    stats = manager.stats
    assert stats.fifo_replacements == stats.evictions_to_swap
    assert stats.loads_from_swap <= stats.page_faults
    assert stats.hits + stats.page_faults == stats.accesses
    assert manager.process_count == manager.alive_count + manager.finished_count
    assert len(simulator.history) == simulator.elapsed
