from __future__ import annotations

import math

import numpy as np
import pyarrow as pa
import pytest

from mcmc_diag.config import DiagnosticsConfig
from mcmc_diag.errors import DegenerateInputWarning
from mcmc_diag.summary import SUMMARY_METRICS, summarize


def _make_table(n_chains: int = 4, n_draws: int = 200, seed: int = 0) -> pa.Table:
    rng = np.random.default_rng(seed)
    chain = np.repeat(np.arange(n_chains), n_draws)
    draw = np.tile(np.arange(n_draws), n_chains)
    return pa.table(
        {
            "chain": pa.array(chain, type=pa.int32()),
            "draw": pa.array(draw, type=pa.int32()),
            "mu": pa.array(rng.normal(loc=1.0, size=n_chains * n_draws)),
            "tau": pa.array(rng.gamma(2.0, size=n_chains * n_draws)),
        }
    )


def test_summarize_reports_all_metrics() -> None:
    result = summarize(_make_table())

    assert list(result) == ["mu", "tau"]
    for metrics in result.values():
        assert tuple(metrics) == SUMMARY_METRICS
    mu = result["mu"]
    assert mu["mean"] == pytest.approx(1.0, abs=0.15)
    assert mu["q5"] < mu["q50"] < mu["q95"]
    assert 0 < mu["ess_bulk"] <= 800
    assert mu["rhat"] < 1.05
    assert mu["mcse_mean"] > 0


def test_summarize_param_selection_and_config() -> None:
    config = DiagnosticsConfig(split=1, method="direct")

    result = summarize(_make_table(), params=["tau"], config=config)

    assert list(result) == ["tau"]
    assert result["tau"]["ess_bulk"] > 0


def test_summarize_constant_parameter_only_affects_itself() -> None:
    x = np.random.default_rng(1).normal(size=(100, 4, 2))
    x[:, :, 1] = 3.0

    with pytest.warns(DegenerateInputWarning):
        result = summarize(x, params=["a", "b"])

    assert result["a"]["ess_bulk"] > 0
    assert math.isnan(result["b"]["ess_bulk"])
    assert math.isnan(result["b"]["rhat"])
    assert result["b"]["mean"] == 3.0


def test_summarize_single_chain_has_nan_rhat() -> None:
    result = summarize(_make_table(n_chains=1))

    assert math.isnan(result["mu"]["rhat"])
    assert result["mu"]["ess_bulk"] > 0
