"""Error taxonomy for the diagnostics engine."""

from __future__ import annotations

import warnings

import numpy as np


class DiagnosticsError(ValueError):
    """Base class for input the diagnostics cannot be computed on."""


class ShapeError(DiagnosticsError):
    """Chains are missing, of unequal length, or too short."""


class InsufficientChainsError(DiagnosticsError):
    """R-hat was requested with fewer than 2 chains."""


class InvalidDrawsError(DiagnosticsError):
    """Draws contain NaN or infinite values."""


class DegenerateInputWarning(RuntimeWarning):
    """A parameter has zero variance; its diagnostic is reported by policy."""


DEGENERATE_POLICIES = ("nan", "ideal")


def check_degenerate_policy(policy: str) -> str:
    if policy not in DEGENERATE_POLICIES:
        raise ValueError(
            f"degenerate must be one of {', '.join(DEGENERATE_POLICIES)}; got {policy!r}"
        )
    return policy


def resolve_degenerate(
    value: float,
    *,
    ideal: float,
    policy: str,
    statistic: str,
    param_index: int | None,
) -> float:
    """Apply the degenerate-input policy to a NaN diagnostic."""
    if not np.isnan(value):
        return value
    where = "input" if param_index is None else f"parameter {param_index}"
    warnings.warn(
        f"{statistic} is undefined for {where}: draws have zero variance",
        DegenerateInputWarning,
        stacklevel=3,
    )
    return ideal if policy == "ideal" else value
