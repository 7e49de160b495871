"""CLI entry point for mcmc-diag."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

import click
import numpy as np

from . import draws as draws_mod
from .config import DiagnosticsConfig
from .ess import ESS_KINDS, ESSMethod, ess
from .mcse import MCSE_KINDS, mcse
from .rhat import rhat
from .summary import summarize

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_format_option = click.option(
    "--format",
    "format_",
    type=click.Choice(["table", "csv", "json"], case_sensitive=False),
    default="table",
)
_params_option = click.option("--params", default=None, help="Comma-separated parameter list")
_split_option = click.option("--split", type=click.IntRange(min=1), default=None)
_method_option = click.option(
    "--method",
    type=click.Choice([m.value for m in ESSMethod], case_sensitive=False),
    default=None,
)
_degenerate_option = click.option(
    "--degenerate",
    type=click.Choice(["nan", "ideal"], case_sensitive=False),
    default=None,
    help="How constant parameters are reported",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """mcmc-diag CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


@main.command("summary")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_params_option
@_format_option
@_split_option
@_method_option
@_degenerate_option
def summary_cmd(
    path: Path,
    params: str | None,
    format_: str,
    split: int | None,
    method: str | None,
    degenerate: str | None,
) -> None:
    config = _config(split, method, degenerate)
    table = _run(lambda: draws_mod.read_draws(path))
    stats = _run(lambda: summarize(table, params=_param_list(params), config=config))
    _emit(stats, format_)


@main.command("ess")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_params_option
@_format_option
@click.option("--kind", type=click.Choice(ESS_KINDS), default="bulk")
@click.option("--prob", type=float, default=None, help="Probability for --kind quantile")
@click.option("--relative", is_flag=True, help="Divide by the total number of draws")
@_split_option
@_method_option
@_degenerate_option
def ess_cmd(
    path: Path,
    params: str | None,
    format_: str,
    kind: str,
    prob: float | None,
    relative: bool,
    split: int | None,
    method: str | None,
    degenerate: str | None,
) -> None:
    config = _config(split, method, degenerate)
    array, names = _load(path, params)
    values = _run(
        lambda: ess(
            array,
            kind=kind,
            prob=prob,
            method=config.method,
            split=config.split,
            maxlag=config.maxlag,
            relative=relative,
            degenerate=config.degenerate,
        )
    )
    _emit(_by_param(names, f"ess_{kind}", values), format_)


@main.command("rhat")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_params_option
@_format_option
@click.option("--rank-normalize/--no-rank-normalize", default=True)
@click.option("--fold/--no-fold", default=True)
@_split_option
@_degenerate_option
def rhat_cmd(
    path: Path,
    params: str | None,
    format_: str,
    rank_normalize: bool,
    fold: bool,
    split: int | None,
    degenerate: str | None,
) -> None:
    config = _config(split, None, degenerate)
    array, names = _load(path, params)
    values = _run(
        lambda: rhat(
            array,
            split=config.split,
            rank_normalize=rank_normalize,
            fold=fold,
            degenerate=config.degenerate,
        )
    )
    _emit(_by_param(names, "rhat", values), format_)


@main.command("mcse")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_params_option
@_format_option
@click.option("--kind", type=click.Choice(MCSE_KINDS), default="mean")
@click.option("--prob", type=float, default=None, help="Probability for --kind quantile")
@_split_option
@_method_option
@_degenerate_option
def mcse_cmd(
    path: Path,
    params: str | None,
    format_: str,
    kind: str,
    prob: float | None,
    split: int | None,
    method: str | None,
    degenerate: str | None,
) -> None:
    config = _config(split, method, degenerate)
    array, names = _load(path, params)
    values = _run(
        lambda: mcse(
            array,
            kind=kind,
            prob=prob,
            method=config.method,
            split=config.split,
            maxlag=config.maxlag,
            degenerate=config.degenerate,
        )
    )
    _emit(_by_param(names, f"mcse_{kind}", values), format_)


def _config(split: int | None, method: str | None, degenerate: str | None) -> DiagnosticsConfig:
    base = DiagnosticsConfig.from_env()
    return DiagnosticsConfig(
        split=split if split is not None else base.split,
        method=ESSMethod(method.lower()) if method else base.method,
        maxlag=base.maxlag,
        rank_normalize=base.rank_normalize,
        fold=base.fold,
        degenerate=degenerate.lower() if degenerate else base.degenerate,
    )


def _param_list(params: str | None) -> list[str] | None:
    return params.split(",") if params else None


def _load(path: Path, params: str | None) -> tuple[np.ndarray, list[str]]:
    table = _run(lambda: draws_mod.read_draws(path))
    return _run(lambda: draws_mod.as_chain_array(table, _param_list(params)))


def _run(compute: Callable):
    try:
        return compute()
    except ValueError as exc:
        click.echo(f"error: {exc}", err=True)
        raise SystemExit(1) from exc


def _by_param(names: list[str], metric: str, values: np.ndarray) -> dict[str, dict[str, float]]:
    return {name: {metric: float(v)} for name, v in zip(names, values, strict=False)}


def _emit(stats: dict[str, dict[str, float]], format_: str) -> None:
    if format_ == "json":
        click.echo(json.dumps(stats, indent=2))
        return
    if format_ == "csv":
        headers = ["param"] + _metric_headers(stats)
        click.echo(",".join(headers))
        for param, metrics in stats.items():
            row = [param] + [str(metrics.get(h, "")) for h in headers[1:]]
            click.echo(",".join(row))
        return
    _print_table(stats)


def _metric_headers(stats: dict[str, dict[str, float]]) -> list[str]:
    headers: list[str] = []
    for metrics in stats.values():
        headers.extend(k for k in metrics if k not in headers)
    return headers


def _print_table(stats: dict[str, dict[str, float]]) -> None:
    headers = ["param"] + _metric_headers(stats)
    widths = [max(len(h), 8) for h in headers]
    widths[0] = max([widths[0]] + [len(p) for p in stats])
    line = " ".join(h.ljust(w) for h, w in zip(headers, widths, strict=False))
    click.echo(line)
    for param, metrics in stats.items():
        row = [param] + [f"{metrics.get(h, float('nan')):.6g}" for h in headers[1:]]
        click.echo(" ".join(val.ljust(w) for val, w in zip(row, widths, strict=False)))
