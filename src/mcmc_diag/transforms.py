"""Pure array transforms applied before R-hat and ESS.

All functions take a ``(draw, chain)`` array for one parameter and pool
every chain when computing ranks, medians and quantiles.
"""

from __future__ import annotations

import numpy as np
from scipy.special import ndtri
from scipy.stats import rankdata


def rank_normalize(x: np.ndarray) -> np.ndarray:
    """Replace draws by normal scores of their pooled ranks.

    Ties share their average rank; ranks map to ``(r - 3/8) / (S + 1/4)``
    before the inverse normal CDF (Blom's offset).
    """
    size = x.size
    ranks = rankdata(x, method="average").reshape(x.shape)
    return ndtri((ranks - 0.375) / (size + 0.25))


def fold(x: np.ndarray) -> np.ndarray:
    """Absolute deviation from the pooled median."""
    return np.abs(x - np.median(x))


def quantile_indicator(x: np.ndarray, prob: float) -> np.ndarray:
    if not 0.0 < prob < 1.0:
        raise ValueError(f"prob must be in (0, 1); got {prob}")
    return (x <= np.quantile(x, prob)).astype(float)


def squared_deviation(x: np.ndarray) -> np.ndarray:
    return (x - np.mean(x)) ** 2
