"""Pointer trajectory sampling.

Collects pointer positions for one gesture attempt, dropping samples that
land too close to the previous stored one. Keeps the trajectory short no
matter how often the host fires move events.

Usage:
    sampler = TrajectorySampler(sample_min_px=6)
    sampler.accept(PointerSample(10, 10, 0.0))
    points = sampler.trajectory.as_array()
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class PointerSample:
    """A pointer position in viewport coordinates."""
    x: float
    y: float
    timestamp: float = 0.0

    def distance_to(self, other: PointerSample) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class Trajectory:
    """Append-only sequence of samples for a single gesture attempt."""
    _samples: list[PointerSample] = field(default_factory=list)

    def append(self, sample: PointerSample):
        self._samples.append(sample)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PointerSample]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> PointerSample:
        return self._samples[index]

    @property
    def first(self) -> PointerSample | None:
        return self._samples[0] if self._samples else None

    @property
    def last(self) -> PointerSample | None:
        return self._samples[-1] if self._samples else None

    @property
    def duration(self) -> float:
        if len(self._samples) < 2:
            return 0.0
        return self._samples[-1].timestamp - self._samples[0].timestamp

    def as_array(self) -> np.ndarray:
        """Return the points as a (N, 2) float array."""
        if not self._samples:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([(s.x, s.y) for s in self._samples], dtype=np.float64)

    @property
    def path_length(self) -> float:
        """Total distance travelled along the stored points."""
        pts = self.as_array()
        if len(pts) < 2:
            return 0.0
        return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


class TrajectorySampler:
    """Throttles incoming samples by minimum pixel spacing."""

    def __init__(self, sample_min_px: float = 6.0):
        self.sample_min_px = sample_min_px
        self.trajectory = Trajectory()

    def accept(self, sample: PointerSample) -> bool:
        """Append the sample if it is far enough from the last one.

        Returns True when the sample was stored.
        """
        last = self.trajectory.last
        if last is not None and last.distance_to(sample) < self.sample_min_px:
            return False
        self.trajectory.append(sample)
        return True
