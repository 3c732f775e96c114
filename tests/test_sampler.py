"""Tests for trajectory sampling."""

import numpy as np
import pytest

from mouse_gestures.sampler import PointerSample, Trajectory, TrajectorySampler


class TestPointerSample:
    def test_distance(self):
        a = PointerSample(0, 0)
        b = PointerSample(3, 4)
        assert a.distance_to(b) == pytest.approx(5.0)

    def test_immutable(self):
        s = PointerSample(1, 2, 0.5)
        with pytest.raises(AttributeError):
            s.x = 10


class TestTrajectorySampler:
    def test_first_sample_always_accepted(self):
        sampler = TrajectorySampler(sample_min_px=10)
        assert sampler.accept(PointerSample(5, 5))
        assert len(sampler.trajectory) == 1

    def test_drops_close_samples(self):
        sampler = TrajectorySampler(sample_min_px=6)
        sampler.accept(PointerSample(0, 0))
        assert not sampler.accept(PointerSample(3, 0))
        assert not sampler.accept(PointerSample(5.9, 0))
        assert len(sampler.trajectory) == 1

    def test_accepts_at_threshold(self):
        sampler = TrajectorySampler(sample_min_px=6)
        sampler.accept(PointerSample(0, 0))
        assert sampler.accept(PointerSample(6, 0))

    def test_spacing_measured_from_last_stored(self):
        sampler = TrajectorySampler(sample_min_px=6)
        sampler.accept(PointerSample(0, 0))
        sampler.accept(PointerSample(4, 0))  # dropped
        # 7px from the stored sample even though only 3px from the dropped one
        assert sampler.accept(PointerSample(7, 0))
        assert [s.x for s in sampler.trajectory] == [0, 7]

    def test_zero_spacing_keeps_every_distinct_sample(self):
        sampler = TrajectorySampler(sample_min_px=0)
        for i in range(10):
            sampler.accept(PointerSample(i, 0))
        assert len(sampler.trajectory) == 10

    def test_length_bounded_by_distance(self):
        """Dense move events don't grow the trajectory past distance / spacing."""
        sampler = TrajectorySampler(sample_min_px=5)
        for i in range(1000):
            sampler.accept(PointerSample(i * 0.1, 0))  # 100px in 0.1px steps
        assert len(sampler.trajectory) <= 100 / 5 + 1


class TestTrajectory:
    def test_as_array(self):
        traj = Trajectory()
        traj.append(PointerSample(0, 0))
        traj.append(PointerSample(10, 5))
        arr = traj.as_array()
        assert arr.shape == (2, 2)
        np.testing.assert_allclose(arr[1], [10, 5])

    def test_empty(self):
        traj = Trajectory()
        assert traj.as_array().shape == (0, 2)
        assert traj.first is None
        assert traj.path_length == 0.0
        assert traj.duration == 0.0

    def test_path_length_and_duration(self):
        traj = Trajectory()
        traj.append(PointerSample(0, 0, 1.0))
        traj.append(PointerSample(3, 4, 1.5))
        traj.append(PointerSample(3, 10, 2.0))
        assert traj.path_length == pytest.approx(11.0)
        assert traj.duration == pytest.approx(1.0)
