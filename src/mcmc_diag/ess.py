"""Effective sample size.

The estimator follows Vehtari et al. (2021): per-chain autocovariances are
averaged across chains and normalized by the multi-chain variance estimate
used by R-hat, then summed with Geyer's initial monotone sequence.

Methods:
  - ``direct``: O(N^2) autocovariance, for cross-checks and short chains
  - ``fft``: FFT autocovariance (default)
  - ``bda``: variogram autocorrelation (BDA3), truncated at the first lag
    whose autocorrelation drops below ``BDA_THRESHOLD``
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from functools import partial

import numpy as np

from . import transforms
from .autocov import AutocovMethod, autocovariance
from .draws import as_result, check_chain_array
from .errors import check_degenerate_policy, resolve_degenerate
from .rhat import rhat
from .splitting import split_chains

DEFAULT_MAXLAG = 250
BDA_THRESHOLD = 0.05
ESS_KINDS = ("bulk", "tail", "basic", "mean", "std", "quantile", "median", "mad")


class ESSMethod(str, Enum):
    DIRECT = "direct"
    FFT = "fft"
    BDA = "bda"


def ess(
    samples,
    *,
    kind: str = "bulk",
    prob: float | None = None,
    method: ESSMethod | str = ESSMethod.FFT,
    split: int = 2,
    maxlag: int = DEFAULT_MAXLAG,
    relative: bool = False,
    degenerate: str = "nan",
):
    """Effective sample size of each parameter in a ``(draw, chain[, parameter])`` array.

    ``kind`` selects the quantity whose ESS is estimated:

      - ``"bulk"``: rank-normalized draws
      - ``"tail"``: the smaller of the 5% and 95% quantile ESS
      - ``"basic"`` / ``"mean"``: the raw draws
      - ``"std"``: squared deviations from the pooled mean
      - ``"quantile"``: the indicator ``x <= quantile(x, prob)``
      - ``"median"``: the 50% quantile ESS
      - ``"mad"``: the median ESS of draws folded around the pooled median

    Values lie in ``(0, total draws]``; ``relative=True`` divides by the
    total. Constant inputs follow the ``degenerate`` policy.
    """
    check_degenerate_policy(degenerate)
    if kind not in ESS_KINDS:
        raise ValueError(f"Unknown ESS kind: {kind}")
    if kind == "quantile" and prob is None:
        raise ValueError("kind='quantile' requires prob")
    method = ESSMethod(method)
    if maxlag < 1:
        raise ValueError(f"maxlag must be >= 1; got {maxlag}")
    x, single = check_chain_array(samples)
    total = x.shape[0] * x.shape[1]
    values = np.empty(x.shape[2])
    for p in range(x.shape[2]):
        value = estimate_ess(
            x[:, :, p], kind=kind, prob=prob, method=method, split=split, maxlag=maxlag
        )
        values[p] = resolve_degenerate(
            value,
            ideal=float(total),
            policy=degenerate,
            statistic="ESS",
            param_index=None if single else p,
        )
    if relative:
        values = values / total
    return as_result(values, single)


def ess_rhat(
    samples,
    *,
    kind: str = "bulk",
    method: ESSMethod | str = ESSMethod.FFT,
    split: int = 2,
    maxlag: int = DEFAULT_MAXLAG,
    degenerate: str = "nan",
):
    """Return ``(ess, rhat)`` with shared splitting and degenerate policy."""
    ess_value = ess(
        samples, kind=kind, method=method, split=split, maxlag=maxlag, degenerate=degenerate
    )
    return ess_value, rhat(samples, split=split, degenerate=degenerate)


def estimate_ess(
    x: np.ndarray,
    *,
    kind: str = "bulk",
    prob: float | None = None,
    method: ESSMethod = ESSMethod.FFT,
    split: int = 2,
    maxlag: int = DEFAULT_MAXLAG,
) -> float:
    """ESS of one validated ``(draw, chain)`` array; NaN when degenerate."""
    estimates = [
        _ess_param(y, method=method, split=split, maxlag=maxlag)
        for y in _expectands(x, kind, prob)
    ]
    return float(np.min(estimates))


def initial_monotone_tau(rho: np.ndarray) -> float:
    """Integrated autocorrelation time from autocorrelations ``rho[0..K]``.

    Pairs ``rho[2m] + rho[2m + 1]`` are summed up to the first non-positive
    pair, after being made non-increasing.
    """
    npairs = len(rho) // 2
    pairs = rho[: 2 * npairs].reshape(npairs, 2).sum(axis=1)
    nonpositive = np.flatnonzero(pairs <= 0)
    cutoff = nonpositive[0] if nonpositive.size else npairs
    pairs = np.minimum.accumulate(pairs[:cutoff])
    return float(-1.0 + 2.0 * pairs.sum())


def _ess_param(x: np.ndarray, *, method: ESSMethod, split: int, maxlag: int) -> float:
    chains = split_chains(x, split)
    if np.ptp(chains) == 0:
        return float("nan")
    n, m = chains.shape
    total = n * m
    within = chains.var(axis=0, ddof=1).mean()
    var_plus = (n - 1) / n * within
    if m > 1:
        var_plus += chains.mean(axis=0).var(ddof=1)
    tau = _TAU[method](chains, within, var_plus, min(maxlag, n - 1))
    if tau <= 0:
        return float(total)
    return float(min(total / tau, total))


def _tau_geyer(
    chains: np.ndarray,
    within: float,
    var_plus: float,
    maxlag: int,
    *,
    autocov_method: AutocovMethod,
) -> float:
    acov = autocovariance(chains, autocov_method, maxlag=maxlag)
    rho = 1.0 - (within - acov.mean(axis=1)) / var_plus
    rho[0] = 1.0
    return initial_monotone_tau(rho)


def _tau_bda(chains: np.ndarray, within: float, var_plus: float, maxlag: int) -> float:
    rho_sum = 0.0
    for lag in range(1, maxlag + 1):
        variogram = np.mean((chains[lag:] - chains[:-lag]) ** 2)
        rho = 1.0 - variogram / (2.0 * var_plus)
        if rho < BDA_THRESHOLD:
            break
        rho_sum += rho
    return 1.0 + 2.0 * rho_sum


_TAU: dict[ESSMethod, Callable[[np.ndarray, float, float, int], float]] = {
    ESSMethod.DIRECT: partial(_tau_geyer, autocov_method=AutocovMethod.DIRECT),
    ESSMethod.FFT: partial(_tau_geyer, autocov_method=AutocovMethod.FFT),
    ESSMethod.BDA: _tau_bda,
}


def _expectands(x: np.ndarray, kind: str, prob: float | None) -> list[np.ndarray]:
    if kind in ("basic", "mean"):
        return [x]
    if kind == "bulk":
        return [transforms.rank_normalize(x)]
    if kind == "std":
        return [transforms.squared_deviation(x)]
    if kind == "median":
        return [transforms.quantile_indicator(x, 0.5)]
    if kind == "mad":
        return [transforms.quantile_indicator(transforms.fold(x), 0.5)]
    if kind == "quantile":
        return [transforms.quantile_indicator(x, prob)]
    return [transforms.quantile_indicator(x, 0.05), transforms.quantile_indicator(x, 0.95)]
