"""Per-parameter summary statistics and convergence diagnostics."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from .config import DiagnosticsConfig
from .draws import as_chain_array
from .ess import ess
from .mcse import mcse
from .rhat import rhat

logger = logging.getLogger(__name__)

SUMMARY_METRICS = (
    "mean",
    "std",
    "q5",
    "q50",
    "q95",
    "mcse_mean",
    "mcse_std",
    "ess_bulk",
    "ess_tail",
    "rhat",
)


def summarize(
    source: Any,
    params: Sequence[str] | None = None,
    config: DiagnosticsConfig | None = None,
    quantiles: Iterable[float] = (0.05, 0.5, 0.95),
) -> dict[str, dict[str, float]]:
    """Summarize every parameter of ``source``.

    ``source`` is anything :func:`~mcmc_diag.draws.as_chain_array` accepts.
    Parameters are computed independently, so one constant parameter only
    turns its own diagnostics into NaN.

    Example:
        table = summarize(draws, params=["mu", "tau"])
        table["mu"]["rhat"]
    """
    config = config or DiagnosticsConfig()
    array, names = as_chain_array(source, params)
    qs = list(quantiles)
    results: dict[str, dict[str, float]] = {}
    for index, name in enumerate(names):
        logger.debug("summarizing %s (%d/%d)", name, index + 1, len(names))
        results[name] = _summarize_param(array[:, :, index], config, qs)
    return results


def _summarize_param(
    chains: np.ndarray, config: DiagnosticsConfig, qs: list[float]
) -> dict[str, float]:
    options = {
        "method": config.method,
        "split": config.split,
        "maxlag": config.maxlag,
        "degenerate": config.degenerate,
    }
    entry = {
        "mean": float(np.mean(chains)),
        "std": float(np.std(chains, ddof=1)),
    }
    for q, v in zip(qs, np.quantile(chains, qs), strict=False):
        entry[f"q{int(round(q * 100))}"] = float(v)
    entry["mcse_mean"] = mcse(chains, kind="mean", **options)
    entry["mcse_std"] = mcse(chains, kind="std", **options)
    entry["ess_bulk"] = ess(chains, kind="bulk", **options)
    entry["ess_tail"] = ess(chains, kind="tail", **options)
    if chains.shape[1] < 2:
        entry["rhat"] = float("nan")
    else:
        entry["rhat"] = rhat(
            chains,
            split=config.split,
            rank_normalize=config.rank_normalize,
            fold=config.fold,
            degenerate=config.degenerate,
        )
    return entry
