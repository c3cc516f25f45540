from __future__ import annotations


class SimulationError(Exception):
    """Base class for every condition the simulator reports back to its caller."""


class InvalidConfiguration(SimulationError, ValueError):
    pass


class AllocationError(SimulationError):
    pass


class InvalidSize(AllocationError, ValueError):
    pass


class InvalidName(AllocationError, ValueError):
    pass


class InsufficientMemory(AllocationError):
    pass


class DuplicateName(AllocationError):
    pass


class NoSuitableBlock(AllocationError):
    """Enough memory is free in aggregate, but no single free block fits."""


class NotFound(SimulationError, LookupError):
    pass


class NotApplicable(SimulationError):
    pass


class CorruptBlockList(SimulationError):
    """Block bookkeeping is broken. Not recoverable; callers should not catch it."""
