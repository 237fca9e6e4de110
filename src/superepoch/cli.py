from __future__ import annotations

"""Command line interface for superepoch using Typer."""

from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import json
import logging

import numpy as np
import typer
from pydantic import ValidationError

from .config import Settings, load_settings
from .errors import ConfigurationError, IrregularCadenceError, SeriesParseError, WindowOutOfRangeError
from .ingest import read_events, read_timeseries
from .pipeline import EpochResult, IndexAlignment, superpose
from .types import EpochWindowConfig, EventCatalog, TimeSeries
from .utils.logging import get_logger

app = typer.Typer(help="Superposed epoch analysis of scalar timeseries")
logger = logging.getLogger(__name__)

_ANALYSIS_ERRORS = (
    ConfigurationError,
    IrregularCadenceError,
    SeriesParseError,
    WindowOutOfRangeError,
)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _fmt(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.4f}"


def _echo_result(result: EpochResult, show_matrix: bool) -> None:
    typer.echo(f"{'offset':>10} {'median':>10} {'q1':>10} {'q3':>10} {'n':>4}")
    for stat in result.statistics:
        typer.echo(
            f"{stat.center:>10.4f} {_fmt(stat.median):>10} {_fmt(stat.q1):>10} "
            f"{_fmt(stat.q3):>10} {stat.count:>4}"
        )
    if show_matrix:
        typer.echo("")
        filled = result.matrix.filled()
        for row in filled:
            typer.echo(" ".join("-" if np.isnan(v) else f"{v:.4f}" for v in row))


def _load_inputs(cfg: Settings, series_path: Path, events_path: Path, shift: Optional[float]) -> tuple[TimeSeries, EventCatalog]:
    ingest = cfg.ingest
    series = read_timeseries(
        series_path,
        time_col=ingest.time_col,
        value_col=ingest.value_col,
        delimiter=ingest.delimiter,
        sentinel=ingest.sentinel,
    )
    catalog = read_events(events_path)
    delta = ingest.event_shift if shift is None else shift
    if delta:
        catalog = catalog.shifted(delta)
    return series, catalog


def _fail(msg: str, debug: bool, exc: Exception) -> NoReturn:
    if debug:
        logger.exception(msg)
        raise exc
    typer.secho(msg, err=True)
    raise typer.Exit(code=1)


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. window.half_width=2",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if ctx.obj is not None:
        # Settings injected by the caller, e.g. ``CliRunner.invoke(obj=...)``.
        settings = ctx.obj
    else:
        if config is not None and not config.exists():
            raise typer.BadParameter(f"configuration file not found: {config}")
        try:
            settings = load_settings(config) if config else Settings()
        except (OSError, TypeError, json.JSONDecodeError, ValidationError) as exc:
            raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("superepoch", settings.logging.level)
    ctx.obj = settings


@app.command()
def bins(
    ctx: typer.Context,
    half_width: Optional[float] = typer.Option(None, "--half-width"),
    bin_count: Optional[int] = typer.Option(None, "--bin-count"),
    bin_width: Optional[float] = typer.Option(
        None, "--bin-width", help="Nominal bin width; overrides --bin-count"
    ),
) -> None:
    """Print the bin edges and centres of the configured window."""

    cfg: Settings = ctx.obj
    hw = cfg.window.half_width if half_width is None else half_width
    try:
        if bin_width is not None:
            window = EpochWindowConfig.from_bin_width(hw, bin_width, cfg.window.boundary)
        else:
            window = EpochWindowConfig(
                hw, cfg.window.bin_count if bin_count is None else bin_count, cfg.window.boundary
            )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    edges = window.edges
    typer.echo(f"{window.bin_count} bins over [-{window.half_width}, {window.half_width}] ({window.boundary})")
    last = window.bin_count - 1
    for j, center in enumerate(window.centers):
        close = "]" if j == last and window.boundary == "closed" else ")"
        typer.echo(f"{j:>4} [{edges[j]:.4f}, {edges[j + 1]:.4f}{close} center={center:.4f}")


@app.command()
def run(
    ctx: typer.Context,
    series_path: Path = typer.Argument(..., exists=True, dir_okay=False, metavar="SERIES"),
    events_path: Path = typer.Argument(..., exists=True, dir_okay=False, metavar="EVENTS"),
    half_width: Optional[float] = typer.Option(None, "--half-width"),
    bin_count: Optional[int] = typer.Option(None, "--bin-count"),
    bin_width: Optional[float] = typer.Option(
        None, "--bin-width", help="Nominal bin width; overrides --bin-count"
    ),
    boundary: Optional[str] = typer.Option(None, "--boundary", help="closed or open"),
    quantile_method: Optional[str] = typer.Option(None, "--quantile-method"),
    shift: Optional[float] = typer.Option(
        None, "--shift", help="Offset added to every event time"
    ),
    matrix: bool = typer.Option(False, "--matrix", help="Also print the aligned matrix"),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks on failure"),
) -> None:
    """Superpose SERIES around the event times listed in EVENTS.

    Samples are averaged into equal time bins around each event and the
    median and quartiles of every bin are printed, one line per bin.
    """

    cfg: Settings = ctx.obj
    try:
        series, catalog = _load_inputs(cfg, series_path, events_path, shift)
        if bin_width is not None:
            hw = cfg.window.half_width if half_width is None else half_width
            bin_count = EpochWindowConfig.from_bin_width(hw, bin_width).bin_count
        result = superpose(
            series,
            catalog,
            settings=cfg,
            half_width=half_width,
            bin_count=bin_count,
            boundary=boundary,
            quantile_method=quantile_method,
        )
    except _ANALYSIS_ERRORS as exc:
        _fail(f"Superposed epoch analysis failed: {exc}", debug, exc)

    typer.echo(
        f"{len(catalog)} events, {len(series)} samples, "
        f"{result.diagnostics['bin_count']} bins, "
        f"{len(result.diagnostics['empty_events'])} empty windows"
    )
    _echo_result(result, matrix)


@app.command("index-align")
def index_align(
    ctx: typer.Context,
    series_path: Path = typer.Argument(..., exists=True, dir_okay=False, metavar="SERIES"),
    events_path: Path = typer.Argument(..., exists=True, dir_okay=False, metavar="EVENTS"),
    k: Optional[int] = typer.Option(None, "--k", help="Half-width in samples"),
    half_width: Optional[float] = typer.Option(
        None, "--half-width", help="Half-width in time units, converted with the cadence"
    ),
    on_out_of_range: Optional[str] = typer.Option(
        None, "--on-out-of-range", help="raise, skip or partial"
    ),
    quantile_method: Optional[str] = typer.Option(None, "--quantile-method"),
    shift: Optional[float] = typer.Option(None, "--shift"),
    matrix: bool = typer.Option(False, "--matrix", help="Also print the aligned matrix"),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks on failure"),
) -> None:
    """Superpose a uniformly sampled SERIES by sample count.

    Each event contributes the 2k+1 samples centred on the first sample
    after its zero epoch.  The series must have a regular cadence.
    """

    cfg: Settings = ctx.obj
    index_cfg = cfg.index
    if k is None and half_width is None:
        k = index_cfg.k
        half_width = index_cfg.half_width if index_cfg.half_width is not None else cfg.window.half_width
    policy = on_out_of_range or index_cfg.on_out_of_range

    try:
        series, catalog = _load_inputs(cfg, series_path, events_path, shift)
        strategy = IndexAlignment(
            k,
            half_width=half_width,
            on_out_of_range=policy,
            rtol=index_cfg.cadence_rtol,
            atol=index_cfg.cadence_atol,
        )
        result = superpose(
            series,
            catalog,
            strategy,
            settings=cfg,
            quantile_method=quantile_method,
        )
    except _ANALYSIS_ERRORS as exc:
        _fail(f"Index alignment failed: {exc}", debug, exc)

    skipped = result.diagnostics["out_of_range"]
    typer.echo(
        f"{len(catalog)} events, k={result.diagnostics['k']}, "
        f"cadence={result.diagnostics['cadence']:.6g}, {len(skipped)} out of range ({policy})"
    )
    _echo_result(result, matrix)


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
