# src/superepoch/ingest/series.py
"""Readers for delimited numeric series and event lists.

Series files hold one observation per line with the time and value in
fixed columns, e.g. the SILSO daily sunspot file::

    1818;01;01;1818.001;  -1; -1.0;   0;1

Event files hold zero-epoch times separated by newlines, commas or
whitespace.  Blank lines and lines starting with ``#`` are ignored in
both formats.
"""

from __future__ import annotations

import logging
import pathlib
import re
from typing import Iterator, List, Optional, TextIO, Tuple, Union

import numpy as np

from ..errors import SeriesParseError
from ..types import EventCatalog, TimeSeries

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"[,\s]+")


def _split(line: str, delimiter: Optional[str]) -> List[str]:
    if delimiter is None:
        return [t for t in _WS_RE.split(line.strip()) if t]
    return [t.strip() for t in line.split(delimiter)]


def _data_lines(fh: TextIO) -> Iterator[Tuple[int, str]]:
    for lineno, raw in enumerate(fh, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield lineno, line


def _parse_row(
    line: str, *, time_col: int, value_col: int, delimiter: Optional[str]
) -> Tuple[float, float]:
    parts = _split(line, delimiter)
    need = max(time_col, value_col)
    if need >= len(parts):
        raise ValueError(f"line has {len(parts)} columns; requested col {need}")
    try:
        return float(parts[time_col]), float(parts[value_col])
    except ValueError:
        raise ValueError(f"non-numeric time or value in {line!r}") from None


def read_timeseries(
    path: Union[str, pathlib.Path, TextIO],
    *,
    time_col: int = 3,
    value_col: int = 4,
    delimiter: Optional[str] = ";",
    sentinel: Optional[float] = -1.0,
) -> TimeSeries:
    """Read a :class:`TimeSeries` from a delimited text source.

    Parameters
    ----------
    path:
        File path or open text stream.
    time_col, value_col:
        Zero-based columns holding the time and the observed value.
    delimiter:
        Column separator; ``None`` splits on commas and whitespace.
    sentinel:
        Value marking a missing observation.  Such rows are dropped.  Pass
        ``None`` to keep every row.

    Raises
    ------
    SeriesParseError
        If a line lacks the requested columns or holds non-numeric fields.
    """

    if isinstance(path, (str, pathlib.Path)):
        with open(path, "r", encoding="utf8") as fh:
            return read_timeseries(
                fh, time_col=time_col, value_col=value_col, delimiter=delimiter, sentinel=sentinel
            )

    name = getattr(path, "name", "<stream>")
    pairs: List[Tuple[float, float]] = []
    for lineno, line in _data_lines(path):
        try:
            pairs.append(
                _parse_row(line, time_col=time_col, value_col=value_col, delimiter=delimiter)
            )
        except ValueError as e:
            raise SeriesParseError(str(e), path=name, line=lineno) from e

    series = TimeSeries.from_pairs(pairs)
    if sentinel is not None:
        kept = series.drop_sentinel(sentinel)
        dropped = len(series) - len(kept)
        if dropped:
            logger.info("Dropped %d of %d rows equal to sentinel %s in %s", dropped, len(series), sentinel, name)
        series = kept

    if len(series) > 1 and np.any(np.diff(series.times) < 0):
        order = np.argsort(series.times, kind="stable")
        series = TimeSeries(series.times[order], series.values[order])
    return series


def read_events(path: Union[str, pathlib.Path, TextIO]) -> EventCatalog:
    """Read an :class:`EventCatalog` of zero-epoch times."""

    if isinstance(path, (str, pathlib.Path)):
        with open(path, "r", encoding="utf8") as fh:
            return read_events(fh)

    name = getattr(path, "name", "<stream>")
    times: List[float] = []
    for lineno, line in _data_lines(path):
        for token in _split(line, None):
            try:
                times.append(float(token))
            except ValueError as e:
                raise SeriesParseError(f"invalid event time {token!r}", path=name, line=lineno) from e
    return EventCatalog(times)
