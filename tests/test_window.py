import numpy as np

from superepoch.core import extract_window
from superepoch.types import TimeSeries


def make_series():
    times = np.arange(0.0, 10.0, 1.0)
    return TimeSeries(times, times * 10.0)


def test_window_excludes_both_ends():
    window = extract_window(make_series(), 5.0, 2.0)
    np.testing.assert_array_equal(window.offsets, [-1.0, 0.0, 1.0])
    np.testing.assert_array_equal(window.values, [40.0, 50.0, 60.0])
    assert window.zero_epoch == 5.0


def test_window_between_samples():
    window = extract_window(make_series(), 4.5, 1.0)
    np.testing.assert_allclose(window.offsets, [-0.5, 0.5])


def test_event_outside_series_gives_empty_window():
    series = make_series()
    for zero_epoch in (-20.0, 50.0):
        window = extract_window(series, zero_epoch, 3.0)
        assert window.empty
        assert window.values.size == 0


def test_window_at_series_boundary_is_partial():
    window = extract_window(make_series(), 0.0, 2.5)
    np.testing.assert_array_equal(window.offsets, [0.0, 1.0, 2.0])


def test_window_inside_gap_is_empty():
    series = TimeSeries([0.0, 1.0, 10.0, 11.0], [1.0, 1.0, 2.0, 2.0])
    assert extract_window(series, 5.5, 2.0).empty
