"""Trail rendering hints, coalesced to the host's paint rate.

Pointer moves only mark the trail dirty. The host calls ``flush()`` when it
is about to paint and gets at most one ``TrailFrame`` back, however many moves
arrived since the previous paint. Recognition never waits on drawing.

The frame carries the recent points plus a "comet" ramp: older segments are
thinner and more transparent than the newest one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from mouse_gestures.config import TrailStyle
from mouse_gestures.sampler import Trajectory


@dataclass
class TrailFrame:
    """One paint's worth of trail state."""
    points: np.ndarray  # shape (N, 2)
    style: TrailStyle
    alphas: np.ndarray = field(default_factory=lambda: np.zeros(0))  # per segment, N-1
    widths: np.ndarray = field(default_factory=lambda: np.zeros(0))
    clear: bool = False

    @property
    def segment_count(self) -> int:
        return max(0, len(self.points) - 1)

    def to_dict(self) -> dict:
        return {
            "clear": self.clear,
            "points": np.round(self.points, 1).tolist(),
            "alphas": np.round(self.alphas, 3).tolist(),
            "widths": np.round(self.widths, 2).tolist(),
            "color": self.style.color,
        }


def comet_ramp(n_points: int, style: TrailStyle) -> tuple[np.ndarray, np.ndarray]:
    """Per-segment alpha and width, fading toward the oldest segment."""
    if n_points < 2:
        return np.zeros(0), np.zeros(0)
    t = np.arange(1, n_points, dtype=np.float64) / (n_points - 1)
    alphas = style.alpha * t
    widths = np.maximum(1.0, style.line_width * t)
    return alphas, widths


class TrailScheduler:
    """Coalesces trail updates between paints."""

    def __init__(self, style: Optional[TrailStyle] = None, max_points: int = 256):
        self.style = style or TrailStyle()
        self.max_points = max_points
        self._trajectory: Optional[Trajectory] = None
        self._dirty = False
        self._clear_pending = False
        self.requests = 0
        self.renders = 0

    def request(self, trajectory: Trajectory, style: Optional[TrailStyle] = None):
        """Ask for the trail to be redrawn at the next paint."""
        self._trajectory = trajectory
        if style is not None:
            self.style = style
        self._dirty = True
        self.requests += 1

    def clear(self):
        """Drop the trail; the next flush tells the renderer to wipe it."""
        self._trajectory = None
        self._dirty = False
        self._clear_pending = True

    @property
    def pending(self) -> bool:
        return self._dirty or self._clear_pending

    def flush(self) -> Optional[TrailFrame]:
        """Called at a paint opportunity. Returns None if nothing changed."""
        if self._clear_pending and not self._dirty:
            self._clear_pending = False
            self.renders += 1
            return TrailFrame(points=np.zeros((0, 2)), style=self.style, clear=True)

        if not self._dirty or self._trajectory is None:
            return None

        self._dirty = False
        cleared = self._clear_pending
        self._clear_pending = False

        points = self._trajectory.as_array()[-self.max_points:]
        alphas, widths = comet_ramp(len(points), self.style)
        self.renders += 1
        return TrailFrame(points=points, style=self.style, alphas=alphas, widths=widths, clear=cleared)
