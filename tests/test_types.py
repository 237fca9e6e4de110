import numpy as np
import pytest

from superepoch.errors import ConfigurationError
from superepoch.types import AlignedMatrix, EpochWindowConfig, EventCatalog, TimeSeries


def test_timeseries_validation():
    ts = TimeSeries([0.0, 1.0, 2.0], [5.0, 6.0, 7.0])
    assert len(ts) == 3
    with pytest.raises(ValueError):
        TimeSeries([0, 1], [1])
    with pytest.raises(ValueError):
        TimeSeries([[0, 1]], [[1, 2]])


def test_timeseries_is_read_only():
    ts = TimeSeries([0.0, 1.0], [5.0, 6.0])
    with pytest.raises(ValueError):
        ts.values[0] = 1.0


def test_from_pairs_and_drop_sentinel():
    ts = TimeSeries.from_pairs([(0.0, 3.0), (1.0, -1.0), (2.0, 4.0)])
    kept = ts.drop_sentinel(-1.0)
    np.testing.assert_array_equal(kept.times, [0.0, 2.0])
    np.testing.assert_array_equal(kept.values, [3.0, 4.0])
    assert len(TimeSeries.from_pairs([])) == 0


def test_catalog_preserves_order_and_duplicates():
    cat = EventCatalog([3.0, 1.0, 1.0])
    assert list(cat) == [3.0, 1.0, 1.0]
    np.testing.assert_allclose(cat.shifted(-0.5).times, [2.5, 0.5, 0.5])


def test_window_config_edges_and_centers():
    cfg = EpochWindowConfig(4.0, 8)
    np.testing.assert_allclose(cfg.edges, np.arange(-4.0, 4.5, 1.0))
    np.testing.assert_allclose(cfg.centers, np.arange(-3.5, 4.0, 1.0))
    assert cfg.edges[0] == -4.0
    assert cfg.edges[-1] == 4.0


@pytest.mark.parametrize(
    "half_width, bin_count, boundary",
    [(0.0, 4, "closed"), (-1.0, 4, "closed"), (float("nan"), 4, "closed"), (1.0, 0, "closed"), (1.0, -3, "closed"), (1.0, 2.5, "closed"), (1.0, 4, "both")],
)
def test_window_config_rejects_bad_values(half_width, bin_count, boundary):
    with pytest.raises(ConfigurationError):
        EpochWindowConfig(half_width, bin_count, boundary)


def test_from_bin_width_matches_month_bins():
    cfg = EpochWindowConfig.from_bin_width(4.0, 30 / 365.25)
    assert cfg.bin_count == 97
    with pytest.raises(ConfigurationError):
        EpochWindowConfig.from_bin_width(1.0, 5.0)
    with pytest.raises(ConfigurationError):
        EpochWindowConfig.from_bin_width(1.0, 0.0)


def test_aligned_matrix_column_and_filled():
    m = AlignedMatrix.from_rows(
        [np.array([1.0, 0.0]), np.array([3.0, 4.0])],
        [np.array([False, True]), np.array([False, False])],
        np.array([-0.5, 0.5]),
    )
    assert m.shape == (2, 2)
    assert np.isnan(m.values[0, 1])
    np.testing.assert_array_equal(m.column(0), [1.0, 3.0])
    np.testing.assert_array_equal(m.column(1), [4.0])
    np.testing.assert_array_equal(m.filled(-1.0), [[1.0, -1.0], [3.0, 4.0]])


def test_aligned_matrix_without_rows():
    m = AlignedMatrix.from_rows([], [], np.array([-0.5, 0.5]))
    assert m.shape == (0, 2)


def test_window_config_coerces_numeric_strings():
    cfg = EpochWindowConfig("4", 8)
    assert cfg.half_width == 4.0
    assert isinstance(cfg.half_width, float)
    assert EpochWindowConfig.from_bin_width("1", "0.5").bin_count == 4


@pytest.mark.parametrize("half_width", ["abc", None, "inf", [1.0]])
def test_window_config_rejects_non_numeric_half_width(half_width):
    with pytest.raises(ConfigurationError):
        EpochWindowConfig(half_width, 4)


def test_window_config_rejects_non_numeric_bin_count():
    with pytest.raises(ConfigurationError):
        EpochWindowConfig(1.0, None)
    with pytest.raises(ConfigurationError):
        EpochWindowConfig(1.0, "four")
