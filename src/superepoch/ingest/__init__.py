"""Loaders turning delimited text files into series and event catalogs."""

from .series import read_events, read_timeseries

__all__ = ["read_timeseries", "read_events"]
