"""mcmc-diag package."""

from . import autocov, splitting, transforms
from .autocov import AutocovMethod, autocovariance
from .config import DiagnosticsConfig
from .draws import as_chain_array, read_draws
from .errors import (
    DegenerateInputWarning,
    DiagnosticsError,
    InsufficientChainsError,
    InvalidDrawsError,
    ShapeError,
)
from .ess import ESSMethod, ess, ess_rhat
from .mcse import mcse
from .rhat import rhat
from .splitting import split_chain_indices
from .summary import summarize

__all__ = [
    "AutocovMethod",
    "DegenerateInputWarning",
    "DiagnosticsConfig",
    "DiagnosticsError",
    "ESSMethod",
    "InsufficientChainsError",
    "InvalidDrawsError",
    "ShapeError",
    "as_chain_array",
    "autocov",
    "autocovariance",
    "ess",
    "ess_rhat",
    "mcse",
    "read_draws",
    "rhat",
    "split_chain_indices",
    "splitting",
    "summarize",
    "transforms",
]
