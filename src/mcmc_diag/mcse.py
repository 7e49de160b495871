"""Monte Carlo standard errors of posterior summaries."""

from __future__ import annotations

import math

import numpy as np

from . import transforms
from .draws import as_result, check_chain_array
from .errors import ShapeError, check_degenerate_policy, resolve_degenerate
from .ess import DEFAULT_MAXLAG, ESSMethod, estimate_ess

MCSE_KINDS = ("mean", "std", "quantile")
DEFAULT_MIN_BATCHES = 10


def mcse(
    samples,
    *,
    kind: str = "mean",
    prob: float | None = None,
    method: ESSMethod | str = ESSMethod.FFT,
    split: int = 2,
    maxlag: int = DEFAULT_MAXLAG,
    min_batches: int = DEFAULT_MIN_BATCHES,
    degenerate: str = "nan",
):
    """Monte Carlo standard error of the mean, standard deviation or a quantile.

    - ``"mean"``: ``sqrt(var / ess_bulk)`` with the pooled sample variance.
    - ``"std"``: delta method on the second central moment.
    - ``"quantile"``: batch means over non-overlapping batches of each chain.
      Batches are at least ``total / ess`` draws long so they are roughly
      independent; fewer than ``min_batches`` batches raises
      :class:`~mcmc_diag.errors.ShapeError`.

    Constant draws have no Monte Carlo error; ``degenerate="ideal"`` reports 0.
    """
    check_degenerate_policy(degenerate)
    if kind not in MCSE_KINDS:
        raise ValueError(f"Unknown MCSE kind: {kind}")
    if kind == "quantile":
        if prob is None:
            raise ValueError("kind='quantile' requires prob")
        if not 0.0 < prob < 1.0:
            raise ValueError(f"prob must be in (0, 1); got {prob}")
    method = ESSMethod(method)
    x, single = check_chain_array(samples)
    values = np.empty(x.shape[2])
    for p in range(x.shape[2]):
        chains = x[:, :, p]
        if kind == "mean":
            value = _mcse_mean(chains, method, split, maxlag)
        elif kind == "std":
            value = _mcse_std(chains, method, split, maxlag)
        else:
            value = _mcse_quantile(chains, prob, method, split, maxlag, min_batches)
        values[p] = resolve_degenerate(
            value,
            ideal=0.0,
            policy=degenerate,
            statistic="MCSE",
            param_index=None if single else p,
        )
    return as_result(values, single)


def mcse_from_ess(variance: float, ess_value: float) -> float:
    return math.sqrt(variance / ess_value)


def _mcse_mean(chains: np.ndarray, method: ESSMethod, split: int, maxlag: int) -> float:
    ess_bulk = estimate_ess(chains, kind="bulk", method=method, split=split, maxlag=maxlag)
    if np.isnan(ess_bulk):
        return float("nan")
    return mcse_from_ess(float(np.var(chains, ddof=1)), ess_bulk)


def _mcse_std(chains: np.ndarray, method: ESSMethod, split: int, maxlag: int) -> float:
    ess_std = estimate_ess(chains, kind="std", method=method, split=split, maxlag=maxlag)
    if np.isnan(ess_std):
        return float("nan")
    sd = float(np.std(chains, ddof=1))
    moment_se = mcse_from_ess(float(np.var(transforms.squared_deviation(chains), ddof=1)), ess_std)
    return moment_se / (2.0 * sd)


def _mcse_quantile(
    chains: np.ndarray,
    prob: float,
    method: ESSMethod,
    split: int,
    maxlag: int,
    min_batches: int,
) -> float:
    ess_q = estimate_ess(
        chains, kind="quantile", prob=prob, method=method, split=split, maxlag=maxlag
    )
    if np.isnan(ess_q):
        return float("nan")
    n, m = chains.shape
    batch_len = max(int(math.sqrt(n)), math.ceil(n * m / ess_q))
    per_chain = n // batch_len
    n_batches = per_chain * m
    if n_batches < min_batches:
        raise ShapeError(
            f"quantile MCSE needs at least {min_batches} batches; "
            f"got {n_batches} of {batch_len} draws"
        )
    batches = chains[: per_chain * batch_len].reshape(per_chain, batch_len, m)
    batch_quantiles = np.quantile(batches, prob, axis=1)
    return float(np.sqrt(batch_quantiles.var(ddof=1) / n_batches))
