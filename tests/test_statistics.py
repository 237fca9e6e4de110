import numpy as np
import pytest

from superepoch.core import bin_statistics, column_quartiles
from superepoch.errors import ConfigurationError
from superepoch.types import AlignedMatrix


def make_matrix(rows):
    values = np.array(rows, dtype=float)
    missing = np.isnan(values)
    return AlignedMatrix.from_rows(list(values), list(missing), np.arange(values.shape[1], dtype=float))


def test_linear_quartiles():
    q1, med, q3 = column_quartiles(np.array([4.0, 1.0, 3.0, 2.0]))
    assert q1 == pytest.approx(1.75)
    assert med == pytest.approx(2.5)
    assert q3 == pytest.approx(3.25)


def test_single_value_column():
    assert column_quartiles(np.array([7.5])) == (7.5, 7.5, 7.5)


def test_empty_column_is_an_error():
    with pytest.raises(ValueError):
        column_quartiles(np.array([]))


def test_missing_cells_are_ignored():
    nan = np.nan
    m = make_matrix([[1.0, nan, nan], [2.0, 5.0, nan], [3.0, nan, nan], [4.0, nan, nan]])
    stats = bin_statistics(m)
    np.testing.assert_allclose(stats.median[:2], [2.5, 5.0])
    np.testing.assert_allclose(stats.q1[:2], [1.75, 5.0])
    np.testing.assert_allclose(stats.q3[:2], [3.25, 5.0])
    np.testing.assert_array_equal(stats.count, [4, 1, 0])
    np.testing.assert_array_equal(stats.missing, [False, False, True])
    assert np.isnan(stats.median[2])


def test_iteration_reports_missing_as_none():
    m = make_matrix([[1.0, np.nan], [3.0, np.nan]])
    records = list(bin_statistics(m))
    assert records[0].median == 2.0
    assert records[0].count == 2
    assert records[1].median is None
    assert records[1].q1 is None
    assert records[1].q3 is None
    assert records[1].count == 0


def test_quartile_ordering_on_random_data():
    rng = np.random.default_rng(0)
    values = rng.normal(size=(25, 12))
    values[rng.random(values.shape) < 0.3] = np.nan
    stats = bin_statistics(make_matrix(values))
    ok = stats.count >= 2
    assert ok.any()
    assert (stats.q1[ok] <= stats.median[ok]).all()
    assert (stats.median[ok] <= stats.q3[ok]).all()


def test_alternative_method():
    m = make_matrix([[1.0], [2.0], [3.0], [4.0]])
    stats = bin_statistics(m, method="lower")
    assert stats.q1[0] == 1.0
    assert stats.median[0] == 2.0
    assert stats.method == "lower"
    with pytest.raises(ConfigurationError):
        bin_statistics(m, method="bogus")


def test_statistics_keep_column_order():
    m = make_matrix([[1.0, 2.0, 3.0]])
    stats = bin_statistics(m)
    np.testing.assert_array_equal(stats.centers, [0.0, 1.0, 2.0])
    np.testing.assert_array_equal(stats.median, [1.0, 2.0, 3.0])
