import numpy as np
import pytest

from superepoch.core import assign_bins, bin_event
from superepoch.types import EpochWindowConfig


def test_assign_bins_half_open():
    cfg = EpochWindowConfig(1.0, 4)
    idx = assign_bins([-1.0, -0.75, -0.5, 0.0, 0.49, 0.5, 0.99], cfg)
    np.testing.assert_array_equal(idx, [0, 0, 1, 2, 2, 3, 3])


def test_offsets_outside_window_are_dropped():
    cfg = EpochWindowConfig(1.0, 4)
    idx = assign_bins([-1.5, -1.0000001, 1.0000001, 3.0], cfg)
    np.testing.assert_array_equal(idx, [-1, -1, -1, -1])


def test_closed_policy_keeps_right_edge():
    cfg = EpochWindowConfig(1.0, 4, "closed")
    row, missing = bin_event([-1.0, -0.5, 0.25, 1.0], [1.0, 2.0, 3.0, 4.0], cfg)
    np.testing.assert_array_equal(row, [1.0, 2.0, 3.0, 4.0])
    assert not missing.any()


def test_open_policy_drops_right_edge():
    cfg = EpochWindowConfig(1.0, 4, "open")
    row, missing = bin_event([-1.0, -0.5, 0.25, 1.0], [1.0, 2.0, 3.0, 4.0], cfg)
    np.testing.assert_array_equal(row[:3], [1.0, 2.0, 3.0])
    assert np.isnan(row[3])
    np.testing.assert_array_equal(missing, [False, False, False, True])


def test_cell_is_mean_of_values():
    cfg = EpochWindowConfig(1.0, 2)
    row, missing = bin_event([-0.9, 0.1, 0.2], [5.0, 1.0, 3.0], cfg)
    np.testing.assert_array_equal(row, [5.0, 2.0])
    assert not missing.any()


def test_empty_window_gives_all_missing_row():
    cfg = EpochWindowConfig(2.0, 5)
    row, missing = bin_event([], [], cfg)
    assert row.shape == (5,)
    assert missing.all()
    assert np.isnan(row).all()


@pytest.mark.parametrize("half_width", [1e-9, 1.0, 1e6])
def test_single_bin(half_width):
    cfg = EpochWindowConfig(half_width, 1)
    offsets = np.array([-half_width, 0.0, half_width / 2])
    row, missing = bin_event(offsets, [1.0, 2.0, 6.0], cfg)
    np.testing.assert_allclose(row, [3.0])
    assert not missing.any()


@pytest.mark.parametrize("boundary", ["closed", "open"])
def test_every_offset_in_range_falls_in_exactly_one_bin(boundary):
    cfg = EpochWindowConfig(4.0, 97, boundary)
    rng = np.random.default_rng(42)
    offsets = np.concatenate([rng.uniform(-4.0, 4.0, 5000), cfg.edges[:-1]])
    idx = assign_bins(offsets, cfg)
    assert ((idx >= 0) & (idx < cfg.bin_count)).all()
    edges = cfg.edges
    assert (edges[idx] <= offsets).all()
    assert (offsets < edges[idx + 1]).all()


def test_length_mismatch_is_rejected():
    cfg = EpochWindowConfig(1.0, 2)
    with pytest.raises(ValueError):
        bin_event([0.0, 0.1], [1.0], cfg)
