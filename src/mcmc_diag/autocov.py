"""Biased autocovariance estimators.

``acov[k] = sum_{t < N - k} (x[t] - mean) * (x[t + k] - mean) / N``; the
denominator is ``N`` at every lag, so ``acov[0]`` is the variance with
``ddof=0``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

import numpy as np
from scipy import fft


class AutocovMethod(str, Enum):
    DIRECT = "direct"
    FFT = "fft"


def autocovariance(
    x,
    method: AutocovMethod | str = AutocovMethod.FFT,
    maxlag: int | None = None,
) -> np.ndarray:
    """Autocovariance of one chain (1-D) or of each column of a 2-D array.

    Returns lags ``0..N-1`` (or ``0..maxlag``) along axis 0.
    """
    values = np.asarray(x, dtype=float)
    if values.ndim not in (1, 2):
        raise ValueError(f"expected a 1-D or 2-D array; got {values.ndim} dimensions")
    n = values.shape[0]
    nlags = n if maxlag is None else min(maxlag + 1, n)
    if n <= 1:
        return np.zeros((nlags,) + values.shape[1:])
    centered = values - values.mean(axis=0)
    acov = _ESTIMATORS[AutocovMethod(method)](centered, nlags)
    acov[0] = np.maximum(acov[0], 0.0)
    return acov


def _autocov_direct(centered: np.ndarray, nlags: int) -> np.ndarray:
    n = centered.shape[0]
    acov = np.empty((nlags,) + centered.shape[1:])
    for k in range(nlags):
        acov[k] = np.sum(centered[: n - k] * centered[k:], axis=0) / n
    return acov


def _autocov_fft(centered: np.ndarray, nlags: int) -> np.ndarray:
    n = centered.shape[0]
    # zero padding to >= 2N removes circular wraparound
    nfft = fft.next_fast_len(2 * n, real=True)
    spectrum = fft.rfft(centered, n=nfft, axis=0)
    acov = fft.irfft(spectrum * np.conjugate(spectrum), n=nfft, axis=0)
    return acov[:nlags] / n


_ESTIMATORS: dict[AutocovMethod, Callable[[np.ndarray, int], np.ndarray]] = {
    AutocovMethod.DIRECT: _autocov_direct,
    AutocovMethod.FFT: _autocov_fft,
}
