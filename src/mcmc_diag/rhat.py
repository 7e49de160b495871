"""Potential scale reduction (R-hat).

By default this is the rank-normalized split R-hat: the maximum of the bulk
value (rank-normalized draws) and the tail value (rank-normalized draws
folded around the pooled median), each computed on split chains.
"""

from __future__ import annotations

import numpy as np

from . import transforms
from .draws import as_result, check_chain_array
from .errors import InsufficientChainsError, check_degenerate_policy, resolve_degenerate
from .splitting import split_chains


def rhat(
    samples,
    *,
    split: int = 2,
    rank_normalize: bool = True,
    fold: bool = True,
    degenerate: str = "nan",
):
    """R-hat for each parameter of a ``(draw, chain[, parameter])`` array.

    Returns a float for 2-D input and an array with one value per parameter
    otherwise. Constant draws are reported according to ``degenerate``:
    ``"nan"`` gives NaN and ``"ideal"`` gives 1.0; both warn with
    :class:`~mcmc_diag.errors.DegenerateInputWarning`.
    """
    check_degenerate_policy(degenerate)
    x, single = check_chain_array(samples)
    n_chains = x.shape[1]
    if n_chains < 2:
        raise InsufficientChainsError(f"R-hat requires at least 2 chains; got {n_chains}")
    values = np.empty(x.shape[2])
    for p in range(x.shape[2]):
        value = _rhat_param(x[:, :, p], split, rank_normalize, fold)
        values[p] = resolve_degenerate(
            value,
            ideal=1.0,
            policy=degenerate,
            statistic="R-hat",
            param_index=None if single else p,
        )
    return as_result(values, single)


def rhat_basic(chains: np.ndarray) -> float:
    """Classic R-hat of a ``(draw, chain)`` array, no splitting or transforms.

    NaN when every draw is equal; ``inf`` when each chain is constant but the
    chains disagree.
    """
    n, m = chains.shape
    if np.all(np.ptp(chains, axis=0) == 0):
        return float("nan") if np.ptp(chains) == 0 else float("inf")
    within = chains.var(axis=0, ddof=1).mean()
    between = n * chains.mean(axis=0).var(ddof=1) if m > 1 else 0.0
    var_plus = (n - 1) / n * within + between / n
    return float(np.sqrt(var_plus / within))


def _rhat_param(x: np.ndarray, split: int, rank_normalize: bool, fold: bool) -> float:
    bulk = transforms.rank_normalize(x) if rank_normalize else x
    value = rhat_basic(split_chains(bulk, split))
    if fold:
        tail = transforms.fold(x)
        if rank_normalize:
            tail = transforms.rank_normalize(tail)
        # a constant folded series carries no scale information
        value = np.fmax(value, rhat_basic(split_chains(tail, split)))
    return float(value)
