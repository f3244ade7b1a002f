import random

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from config import MemoryLayout, random_multiplier
from memory_manager import MemoryManager
from simulator import PagingSimulator


def plot_history(history, path):
    ticks = [h["tick"] for h in history]

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    fig.suptitle('FIFO Paging Simulation', fontsize=14, fontweight='bold')

    panels = [
        ('Free Memory', [('free_ram_frames', 'free RAM frames'),
                         ('free_swap_slots', 'free swap slots')]),
        ('Page Faults', [('page_faults', 'page faults'),
                         ('fifo_replacements', 'FIFO replacements')]),
        ('Processes', [('alive', 'alive'),
                       ('created', 'created')]),
    ]

    for ax, (title, series) in zip(axes, panels):
        for key, label in series:
            ax.plot(ticks, [h[key] for h in history], label=label)
        ax.set_title(title)
        ax.set_xlabel('time (s)')
        ax.grid(alpha=0.3)
        ax.legend(loc='upper left')

    plt.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def main(physical_mb=64, page_kb=256, seed=1, max_ticks=600, path='simulation.png'):
    rng = random.Random(seed)
    layout = MemoryLayout.from_units(physical_mb, page_kb, random_multiplier(rng))

    print("Running simulation...")
    simulator = PagingSimulator(MemoryManager(layout), rng, out=lambda line: None)
    stats = simulator.run(max_ticks=max_ticks)
    print(stats)

    plot_history(simulator.history, path)
    print(f"\nGraph saved as '{path}'")


if __name__ == '__main__':
    main()
