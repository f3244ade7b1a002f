import math

# Process sizes drawn by the simulator, in MB
MIN_PROC_MB = 1
MAX_PROC_MB = 20

# Capacity of the process table, live and finished together
MAX_PROCESSES = 1000

# Virtual memory is physical memory scaled by a factor in [low, high)
MULTIPLIER_RANGE = (1.5, 4.5)

# Driver schedule, in ticks (one tick per simulated second)
CREATE_INTERVAL = 2
WARMUP_TICKS = 30
TERMINATE_INTERVAL = 5
ACCESS_INTERVAL = 5

MB = 1024 * 1024
KB = 1024


class InvalidConfigurationError(ValueError):
    pass


def random_multiplier(rng):
    low, high = MULTIPLIER_RANGE
    return low + rng.random() * (high - low)


class MemoryLayout:
    """Frame and swap-slot counts derived once from the memory sizes.

    frame_count = physical // page_size
    total_virtual_pages = int(physical * multiplier) // page_size
    swap_slot_count = total_virtual_pages - frame_count
    """

    def __init__(self, physical_bytes, page_size, multiplier):
        if physical_bytes <= 0:
            raise InvalidConfigurationError(
                f"physical memory must be positive, got {physical_bytes}")
        if page_size <= 0:
            raise InvalidConfigurationError(
                f"page size must be positive, got {page_size}")
        if not math.isfinite(multiplier):
            raise InvalidConfigurationError(
                f"virtual memory multiplier must be finite, got {multiplier}")
        if multiplier < 1:
            raise InvalidConfigurationError(
                f"virtual memory multiplier must be >= 1, got {multiplier}")

        self.physical_bytes = physical_bytes
        self.page_size = page_size
        self.multiplier = multiplier
        self.virtual_bytes = int(physical_bytes * multiplier)
        self.frame_count = physical_bytes // page_size
        self.total_virtual_pages = self.virtual_bytes // page_size
        self.swap_slot_count = self.total_virtual_pages - self.frame_count

        if self.swap_slot_count < 0:
            raise InvalidConfigurationError(
                f"derived swap slot count is negative ({self.swap_slot_count})")

    @classmethod
    def from_sizes(cls, physical_bytes, page_size, multiplier):
        return cls(physical_bytes, page_size, multiplier)

    @classmethod
    def from_units(cls, physical_mb, page_kb, multiplier):
        return cls(physical_mb * MB, page_kb * KB, multiplier)

    def __str__(self):
        return (f"Physical memory: {self.physical_bytes / MB:.2f} MB\n"
                f"Page size: {self.page_size / KB:g} KB\n"
                f"Virtual memory: {self.virtual_bytes / MB:.2f} MB "
                f"(x{self.multiplier:.3f})\n"
                f"RAM frames: {self.frame_count}\n"
                f"Swap slots: {self.swap_slot_count}\n"
                f"Replacement policy: FIFO")
