"""
SwarmMind Scoped Timing
========================
Explicit timing blocks for the expensive parts of a cycle.

Usage:
    timings = CycleTimings()
    with timed("queue_rebuild", timings):
        ...
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator


@dataclass
class CycleTimings:
    """Accumulated wall time (seconds) and call counts per section"""
    sections: Dict[str, float] = field(default_factory=dict)
    calls: Dict[str, int] = field(default_factory=dict)

    def record(self, section: str, elapsed: float) -> None:
        self.sections[section] = self.sections.get(section, 0.0) + elapsed
        self.calls[section] = self.calls.get(section, 0) + 1

    def total(self) -> float:
        return sum(self.sections.values())

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name: {"seconds": seconds, "calls": self.calls.get(name, 0)}
            for name, seconds in self.sections.items()
        }


@contextmanager
def timed(section: str, timings: CycleTimings) -> Iterator[None]:
    """Time the enclosed block; the time is recorded even if it raises"""
    start = time.perf_counter()
    try:
        yield
    finally:
        timings.record(section, time.perf_counter() - start)
