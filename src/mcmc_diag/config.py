"""Diagnostic defaults, optionally overridden from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import check_degenerate_policy
from .ess import DEFAULT_MAXLAG, ESSMethod

ENV_PREFIX = "MCMC_DIAG_"


@dataclass(frozen=True)
class DiagnosticsConfig:
    split: int = 2
    method: ESSMethod = ESSMethod.FFT
    maxlag: int = DEFAULT_MAXLAG
    rank_normalize: bool = True
    fold: bool = True
    degenerate: str = "nan"

    def __post_init__(self) -> None:
        if self.split < 1:
            raise ValueError(f"split must be >= 1; got {self.split}")
        if self.maxlag < 1:
            raise ValueError(f"maxlag must be >= 1; got {self.maxlag}")
        object.__setattr__(self, "method", ESSMethod(self.method))
        check_degenerate_policy(self.degenerate)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DiagnosticsConfig:
        """Build a config from ``MCMC_DIAG_*`` variables; unset ones keep defaults."""
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        if env.get(f"{ENV_PREFIX}SPLIT"):
            overrides["split"] = int(env[f"{ENV_PREFIX}SPLIT"])
        if env.get(f"{ENV_PREFIX}METHOD"):
            overrides["method"] = ESSMethod(env[f"{ENV_PREFIX}METHOD"].lower())
        if env.get(f"{ENV_PREFIX}MAXLAG"):
            overrides["maxlag"] = int(env[f"{ENV_PREFIX}MAXLAG"])
        if env.get(f"{ENV_PREFIX}DEGENERATE"):
            overrides["degenerate"] = env[f"{ENV_PREFIX}DEGENERATE"].lower()
        return cls(**overrides)
