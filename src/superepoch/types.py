"""Common data containers for superepoch.

The structures here are the inputs and outputs of one analysis pass.  They
are small frozen dataclasses around NumPy arrays; nothing in the package
mutates them after construction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError

BOUNDARY_POLICIES = ("closed", "open")


def _as_vector(data: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    arr = np.array(data, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class TimeSeries:
    """Container for paired time and value sequences.

    Times are expected to be strictly increasing and free of missing
    observations; both are the responsibility of whoever builds the series.
    """

    times: np.ndarray
    values: np.ndarray

    def __post_init__(self) -> None:
        times = _as_vector(self.times, "times")
        values = _as_vector(self.values, "values")
        if times.shape != values.shape:
            raise ValueError("times and values must have the same length")
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return int(self.times.size)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, float]]) -> "TimeSeries":
        """Build a series from ``(t, v)`` pairs."""

        rows = list(pairs)
        if not rows:
            return cls(np.empty(0), np.empty(0))
        times, values = zip(*rows)
        return cls(times, values)

    def drop_sentinel(self, sentinel: float) -> "TimeSeries":
        """Return a copy without observations equal to ``sentinel``."""

        keep = self.values != sentinel
        return TimeSeries(self.times[keep], self.values[keep])


@dataclass(frozen=True)
class EventCatalog:
    """Ordered zero-epoch times, one per event."""

    times: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "times", _as_vector(self.times, "times"))

    def __len__(self) -> int:
        return int(self.times.size)

    def __iter__(self) -> Iterator[float]:
        return iter(float(t) for t in self.times)

    def shifted(self, delta: float) -> "EventCatalog":
        """Return a catalog with every zero-epoch moved by ``delta``."""

        return EventCatalog(self.times + delta)


def _positive_float(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number) or number <= 0:
        raise ConfigurationError(f"{name} must be a positive number")
    return number


@dataclass(frozen=True)
class EpochWindowConfig:
    """Relative-time axis ``[-half_width, half_width]`` split into equal bins.

    ``boundary`` decides what happens to an offset of exactly
    ``+half_width``: ``"closed"`` keeps it in the last bin, ``"open"``
    drops it like every other right edge.
    """

    half_width: float
    bin_count: int
    boundary: str = "closed"

    def __post_init__(self) -> None:
        half_width = _positive_float(self.half_width, "half_width")
        try:
            integral = not isinstance(self.bin_count, bool) and int(self.bin_count) == self.bin_count
        except (TypeError, ValueError):
            integral = False
        if not integral:
            raise ConfigurationError("bin_count must be an integer")
        if self.bin_count <= 0:
            raise ConfigurationError("bin_count must be positive")
        if self.boundary not in BOUNDARY_POLICIES:
            raise ConfigurationError(
                f"boundary must be one of {', '.join(BOUNDARY_POLICIES)}"
            )
        object.__setattr__(self, "half_width", half_width)
        object.__setattr__(self, "bin_count", int(self.bin_count))

    @classmethod
    def from_bin_width(
        cls, half_width: float, bin_width: float, boundary: str = "closed"
    ) -> "EpochWindowConfig":
        """Derive the bin count from a nominal bin width.

        The count is ``floor(2 * half_width / bin_width)``, so the actual
        bins are slightly wider than ``bin_width`` when it does not divide
        the window evenly.
        """

        bin_width = _positive_float(bin_width, "bin_width")
        half_width = _positive_float(half_width, "half_width")
        count = int(math.floor(2.0 * half_width / bin_width))
        if count <= 0:
            raise ConfigurationError("bin_width is wider than the whole window")
        return cls(half_width, count, boundary)

    @property
    def edges(self) -> np.ndarray:
        return np.linspace(-self.half_width, self.half_width, self.bin_count + 1)

    @property
    def centers(self) -> np.ndarray:
        edges = self.edges
        return (edges[:-1] + edges[1:]) / 2.0


@dataclass(frozen=True)
class EventWindow:
    """Samples of one event re-expressed as offsets from its zero epoch."""

    zero_epoch: float
    offsets: np.ndarray
    values: np.ndarray

    @property
    def empty(self) -> bool:
        return self.offsets.size == 0


@dataclass(frozen=True)
class AlignedMatrix:
    """Events x bins grid with an explicit missing-cell mask.

    Attributes
    ----------
    values:
        Cell values, shape ``(n_events, n_bins)``.  Missing cells hold NaN
        but consumers should consult ``missing`` instead.
    missing:
        Boolean mask, ``True`` where no sample contributed to the cell.
    centers:
        Offset of each column, ascending.
    """

    values: np.ndarray
    missing: np.ndarray
    centers: np.ndarray

    def __post_init__(self) -> None:
        if self.values.ndim != 2 or self.values.shape != self.missing.shape:
            raise ValueError("values and missing must be 2-D arrays of equal shape")
        if self.centers.shape != (self.values.shape[1],):
            raise ValueError("one center is required per column")

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[np.ndarray],
        masks: Sequence[np.ndarray],
        centers: np.ndarray,
    ) -> "AlignedMatrix":
        """Stack per-event rows and masks into a matrix."""

        n_bins = centers.size
        values = np.array(rows, dtype=float).reshape(len(rows), n_bins)
        missing = np.array(masks, dtype=bool).reshape(len(masks), n_bins)
        values[missing] = np.nan
        return cls(values, missing, np.asarray(centers, dtype=float))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def column(self, j: int) -> np.ndarray:
        """Return the present cells of column ``j``."""

        return self.values[~self.missing[:, j], j]

    def filled(self, fill: float = np.nan) -> np.ndarray:
        """Return a copy of the values with missing cells set to ``fill``."""

        out = self.values.copy()
        out[self.missing] = fill
        return out


class BinStatistic(NamedTuple):
    """Statistics of a single bin; ``None`` marks a missing statistic."""

    center: float
    median: Optional[float]
    q1: Optional[float]
    q3: Optional[float]
    count: int


@dataclass(frozen=True)
class BinStatistics:
    """Per-bin cross-event statistics in ascending offset order."""

    centers: np.ndarray
    median: np.ndarray
    q1: np.ndarray
    q3: np.ndarray
    count: np.ndarray
    method: str = "linear"
    missing: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "missing", np.asarray(self.count) == 0)

    def __len__(self) -> int:
        return int(self.centers.size)

    def __iter__(self) -> Iterator[BinStatistic]:
        for j in range(len(self)):
            if self.missing[j]:
                yield BinStatistic(float(self.centers[j]), None, None, None, 0)
            else:
                yield BinStatistic(
                    float(self.centers[j]),
                    float(self.median[j]),
                    float(self.q1[j]),
                    float(self.q3[j]),
                    int(self.count[j]),
                )


__all__ = [
    "BOUNDARY_POLICIES",
    "TimeSeries",
    "EventCatalog",
    "EpochWindowConfig",
    "EventWindow",
    "AlignedMatrix",
    "BinStatistic",
    "BinStatistics",
]
