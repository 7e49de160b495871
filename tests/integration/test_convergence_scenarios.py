from __future__ import annotations

import numpy as np
import pytest

from mcmc_diag import ESSMethod, ess, ess_rhat, mcse, rhat


def _iid_chains(seed: int = 2024) -> np.ndarray:
    return np.random.default_rng(seed).standard_normal(size=(1000, 4))


def test_iid_normal_chains_converge() -> None:
    x = _iid_chains()

    ess_value, rhat_value = ess_rhat(x)

    assert 0.99 <= rhat_value <= 1.01
    assert 3500 <= ess_value <= 4000


def test_shifted_chain_is_flagged() -> None:
    x = _iid_chains()
    x[:, 1] += 5.0

    assert rhat(x) > 1.1


@pytest.mark.parametrize("method", list(ESSMethod))
def test_methods_agree_on_iid_chains(method: ESSMethod) -> None:
    x = _iid_chains()

    assert ess(x, kind="basic", method=method) > 3000


def test_mcse_shrinks_with_more_draws() -> None:
    rng = np.random.default_rng(8)
    short = rng.standard_normal(size=(250, 4))
    long = rng.standard_normal(size=(4000, 4))

    ratio = mcse(short) / mcse(long)

    # 16x the draws gives roughly 4x smaller error
    assert 2.5 < ratio < 6.0


def test_heavy_tailed_chains_rank_normalized() -> None:
    x = np.random.default_rng(13).standard_cauchy(size=(1000, 4))

    assert 0.99 <= rhat(x) <= 1.02
    assert ess(x, kind="bulk") > 2500
