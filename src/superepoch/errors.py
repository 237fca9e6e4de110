"""Exception types raised by superepoch."""

from __future__ import annotations

import pathlib
from typing import Union


class ConfigurationError(ValueError):
    """Raised when an analysis is configured with invalid parameters."""


class WindowOutOfRangeError(ValueError):
    """Raised when a fixed sample window would run off the series.

    Attributes
    ----------
    zero_epoch:
        Zero-epoch time of the offending event.
    anchor:
        Index of the first sample after ``zero_epoch``.
    k:
        Requested half-width in samples.
    length:
        Number of samples in the series.
    """

    def __init__(self, zero_epoch: float, anchor: int, k: int, length: int):
        self.zero_epoch = zero_epoch
        self.anchor = anchor
        self.k = k
        self.length = length
        super().__init__(
            f"window of {2 * k + 1} samples around index {anchor} "
            f"(event {zero_epoch!r}) exceeds series of length {length}"
        )


class IrregularCadenceError(ValueError):
    """Raised when index alignment is requested on a non-uniform series."""


class SeriesParseError(ValueError):
    """Raised when a series or event file cannot be parsed."""

    def __init__(self, message: str, *, path: Union[str, pathlib.Path], line: int):
        self.path = str(path)
        self.line = line
        super().__init__(f"{self.path}:{self.line}: {message}")


__all__ = [
    "ConfigurationError",
    "WindowOutOfRangeError",
    "IrregularCadenceError",
    "SeriesParseError",
]
