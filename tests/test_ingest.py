import io

import numpy as np
import pytest

from superepoch.errors import SeriesParseError
from superepoch.ingest import read_events, read_timeseries

SILSO = """\
1830;01;01;1830.001;  52;  4.1;   5;1
1830;01;02;1830.004;  -1; -1.0;   0;1
1830;01;03;1830.007;  61;  4.5;   6;1

1830;01;04;1830.010;  70;  5.0;   4;1
"""


def test_read_silso_layout_drops_sentinel(tmp_path):
    path = tmp_path / "SN_d_tot_V2.0.csv"
    path.write_text(SILSO)
    series = read_timeseries(path)
    np.testing.assert_allclose(series.times, [1830.001, 1830.007, 1830.010])
    np.testing.assert_array_equal(series.values, [52.0, 61.0, 70.0])


def test_keep_sentinel_when_disabled():
    series = read_timeseries(io.StringIO(SILSO), sentinel=None)
    assert len(series) == 4
    assert series.values[1] == -1.0


def test_whitespace_columns_and_sorting():
    text = "# t v\n2.0 20\n1.0, 10\n3.0\t30\n"
    series = read_timeseries(io.StringIO(text), time_col=0, value_col=1, delimiter=None)
    np.testing.assert_array_equal(series.times, [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(series.values, [10.0, 20.0, 30.0])


def test_missing_column_reports_line(tmp_path):
    path = tmp_path / "short.csv"
    path.write_text("1830;01;01;1830.001;52\n1830;01;02\n")
    with pytest.raises(SeriesParseError) as excinfo:
        read_timeseries(path)
    assert excinfo.value.line == 2
    assert f"{path}:2:" in str(excinfo.value)


def test_non_numeric_value_reports_line(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1830;01;01;1830.001;abc\n")
    with pytest.raises(SeriesParseError) as excinfo:
        read_timeseries(path)
    assert "non-numeric" in str(excinfo.value)


def test_read_events(tmp_path):
    path = tmp_path / "maxima.txt"
    path.write_text("# solar maxima\n1837.25\n1848.1667, 1860.1667\n\n1870.6667 1883.9167\n")
    catalog = read_events(path)
    np.testing.assert_allclose(catalog.times, [1837.25, 1848.1667, 1860.1667, 1870.6667, 1883.9167])


def test_read_events_bad_token(tmp_path):
    path = tmp_path / "maxima.txt"
    path.write_text("1837.25\nmax\n")
    with pytest.raises(SeriesParseError) as excinfo:
        read_events(path)
    assert excinfo.value.line == 2
