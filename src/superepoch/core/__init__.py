"""Core algorithms for superposed epoch analysis."""

from .binning import assign_bins, bin_event, bin_window
from .index_align import (
    IndexAlignmentResult,
    IndexWindow,
    align_by_index,
    anchor_index,
    check_uniform_cadence,
    index_window,
    samples_for,
)
from .statistics import bin_statistics, column_quartiles
from .window import extract_window

__all__ = [
    "extract_window",
    "assign_bins",
    "bin_event",
    "bin_window",
    "bin_statistics",
    "column_quartiles",
    "IndexWindow",
    "IndexAlignmentResult",
    "anchor_index",
    "samples_for",
    "check_uniform_cadence",
    "index_window",
    "align_by_index",
]
