class Page:
    def __init__(self, pid, page_number):
        self.pid = pid
        self.page_number = page_number
        # At most one of these is set; None means not placed there
        self.frame_index = None
        self.swap_index = None

    @property
    def in_ram(self):
        return self.frame_index is not None

    @property
    def in_swap(self):
        return self.swap_index is not None

    def location(self):
        if self.in_ram:
            return ("ram", self.frame_index)
        if self.in_swap:
            return ("swap", self.swap_index)
        return None

    def place_in_ram(self, frame_index):
        self.frame_index = frame_index
        self.swap_index = None

    def place_in_swap(self, swap_index):
        self.swap_index = swap_index
        self.frame_index = None

    def clear(self):
        self.frame_index = None
        self.swap_index = None

    def __repr__(self):
        return f"Page(pid={self.pid}, page={self.page_number}, at={self.location()})"


class Process:
    def __init__(self, pid, size_bytes, page_size):
        self.pid = pid
        self.size_bytes = size_bytes
        self.page_size = page_size
        self.num_pages = -(-size_bytes // page_size)  # ceil
        self.pages = [Page(pid, i) for i in range(self.num_pages)]
        self.alive = True

    def page_for_address(self, address):
        if address < 0 or address >= self.size_bytes:
            raise IndexError(f"address {address} outside process {self.pid} "
                             f"of {self.size_bytes} bytes")
        return self.pages[address // self.page_size]

    def resident_pages(self):
        return [page for page in self.pages if page.in_ram]

    def swapped_pages(self):
        return [page for page in self.pages if page.in_swap]

    def terminate(self):
        self.alive = False

    def __str__(self):
        state = "alive" if self.alive else "terminated"
        return f"PID={self.pid} size={self.size_bytes}B pages={self.num_pages} ({state})"
