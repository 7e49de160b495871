from __future__ import annotations

import pytest

from mcmc_diag.config import DiagnosticsConfig
from mcmc_diag.ess import ESSMethod


def test_defaults() -> None:
    config = DiagnosticsConfig()

    assert config.split == 2
    assert config.method is ESSMethod.FFT
    assert config.maxlag == 250
    assert config.degenerate == "nan"


def test_method_string_is_coerced() -> None:
    assert DiagnosticsConfig(method="bda").method is ESSMethod.BDA


def test_from_env_overrides() -> None:
    env = {
        "MCMC_DIAG_SPLIT": "3",
        "MCMC_DIAG_METHOD": "DIRECT",
        "MCMC_DIAG_MAXLAG": "40",
        "MCMC_DIAG_DEGENERATE": "ideal",
    }

    config = DiagnosticsConfig.from_env(env)

    assert config == DiagnosticsConfig(
        split=3, method=ESSMethod.DIRECT, maxlag=40, degenerate="ideal"
    )


def test_from_env_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("MCMC_DIAG_SPLIT", "1")
    monkeypatch.delenv("MCMC_DIAG_METHOD", raising=False)

    config = DiagnosticsConfig.from_env()

    assert config.split == 1
    assert config.method is ESSMethod.FFT


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"split": 0}, "split must be"),
        ({"maxlag": 0}, "maxlag must be"),
        ({"degenerate": "drop"}, "degenerate must be one of"),
    ],
)
def test_invalid_values_rejected(kwargs: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        DiagnosticsConfig(**kwargs)
