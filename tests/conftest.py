import pytest

from control.config import SimConfig
from control.simulator import MemorySimulator

TOTAL = 64


def layout(sim):
    """(start, size, status, owner) per block, for readable assertions."""
    return [(b.start_address, b.size, b.status.value, b.owner_name) for b in sim.snapshot()]


@pytest.fixture
def sim():
    return MemorySimulator(SimConfig(total_memory=TOTAL))


@pytest.fixture
def fixed_sim(sim):
    sim.establish_partition_mode("fixed", 4)
    return sim


@pytest.fixture
def holes_sim(sim):
    """Dynamic: A[0,10) FREE[10,15) B[15,25) FREE[25,64)."""
    sim.allocate("A", 10)
    sim.allocate("gap", 5)
    sim.allocate("B", 10)
    sim.deallocate("gap")
    return sim
