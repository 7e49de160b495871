"""Normalize draws into ``(draw, chain, parameter)`` chain arrays."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pyarrow as pa
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

from .errors import InvalidDrawsError, ShapeError

logger = logging.getLogger(__name__)

MIN_DRAWS = 4
INDEX_COLUMNS = frozenset({"chain", "draw"})


def as_chain_array(
    source: Any,
    params: Sequence[str] | None = None,
) -> tuple[np.ndarray, list[str]]:
    """Return ``(array, parameter_names)`` for a supported draws source.

    Sources:
      - pyarrow Table or RecordBatchReader with ``chain`` and ``draw`` columns
      - mapping of parameter name to a list of chains (chain-major)
      - NumPy array shaped ``(draw, chain)`` or ``(draw, chain, parameter)``
    """
    if hasattr(source, "read_all"):
        source = source.read_all()
    if isinstance(source, pa.Table):
        array, names = _from_table(source, params)
    elif isinstance(source, Mapping):
        array, names = _from_mapping(source, params)
    else:
        array = _to_float_array(source)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise ShapeError(
                f"expected a (draw, chain[, parameter]) array; got {array.ndim} dimensions"
            )
        names = list(params) if params is not None else [f"x{i}" for i in range(array.shape[2])]
        if len(names) != array.shape[2]:
            raise ShapeError(f"got {len(names)} names for {array.shape[2]} parameters")
    logger.debug("chain array %s for %d parameter(s)", array.shape, len(names))
    check_chain_array(array)
    return array, names


def check_chain_array(samples: Any) -> tuple[np.ndarray, bool]:
    """Validate numeric draws and return them as a 3-D float copy.

    The flag is ``True`` when the input was 2-D, i.e. a single parameter.
    """
    x = _to_float_array(samples)
    single = x.ndim == 2
    if single:
        x = x[:, :, np.newaxis]
    if x.ndim != 3:
        raise ShapeError(
            f"expected a (draw, chain[, parameter]) array; got {x.ndim} dimensions"
        )
    n_draws, n_chains, n_params = x.shape
    if n_chains < 1:
        raise ShapeError("at least 1 chain is required")
    if n_params < 1:
        raise ShapeError("at least 1 parameter is required")
    if n_draws < MIN_DRAWS:
        raise ShapeError(f"at least {MIN_DRAWS} draws per chain are required; got {n_draws}")
    if not np.all(np.isfinite(x)):
        raise InvalidDrawsError("draws contain NaN or infinite values")
    return x, single


def as_result(values: np.ndarray, single: bool):
    return float(values[0]) if single else values


def read_draws(path: Path) -> pa.Table:
    path = Path(path)
    if path.suffix == ".csv":
        return pacsv.read_csv(path)
    if path.suffix == ".parquet":
        return pq.read_table(path)
    raise ValueError(f"Unsupported input format: {path}")


def _to_float_array(samples: Any) -> np.ndarray:
    try:
        return np.array(samples, dtype=float)
    except ValueError as exc:
        # ragged nesting means chains of different lengths
        raise ShapeError(f"chains have unequal lengths or non-numeric draws: {exc}") from exc


def _check_params(params: Sequence[str], available: Sequence[str]) -> None:
    unknown = [p for p in params if p not in available]
    if unknown:
        raise ShapeError(f"unknown parameter(s): {', '.join(unknown)}")


def _from_table(table: pa.Table, params: Sequence[str] | None) -> tuple[np.ndarray, list[str]]:
    missing = INDEX_COLUMNS - set(table.column_names)
    if missing:
        raise ShapeError(f"draws table is missing column(s): {', '.join(sorted(missing))}")
    if params is None:
        params = [c for c in table.column_names if c not in INDEX_COLUMNS]
    _check_params(params, [c for c in table.column_names if c not in INDEX_COLUMNS])
    chain = table.column("chain").to_numpy()
    draw = table.column("draw").to_numpy()
    order = np.lexsort((draw, chain))
    labels, counts = np.unique(chain, return_counts=True)
    if len(set(counts.tolist())) > 1:
        lengths = dict(zip(labels.tolist(), counts.tolist(), strict=False))
        raise ShapeError(f"chains have unequal lengths: {lengths}")
    if not params:
        raise ShapeError("draws table has no parameter columns")
    n_chains = len(labels)
    n_draws = int(counts[0]) if n_chains else 0
    columns = []
    for param in params:
        values = table.column(param).to_numpy(zero_copy_only=False).astype(float)[order]
        # rows sorted by (chain, draw) reshape to (chain, draw)
        columns.append(values.reshape(n_chains, n_draws).T)
    return np.stack(columns, axis=-1), list(params)


def _from_mapping(
    source: Mapping[str, Sequence[Sequence[float]]],
    params: Sequence[str] | None,
) -> tuple[np.ndarray, list[str]]:
    names = list(params) if params is not None else list(source)
    if not names:
        raise ShapeError("no parameters given")
    _check_params(names, list(source))
    columns = []
    for name in names:
        chains = source[name]
        lengths = {len(c) for c in chains}
        if len(lengths) > 1:
            raise ShapeError(f"chains of {name} have unequal lengths: {sorted(lengths)}")
        columns.append(np.array(chains, dtype=float).T)
    shapes = {c.shape for c in columns}
    if len(shapes) > 1:
        raise ShapeError(f"parameters have differing chain shapes: {sorted(shapes)}")
    return np.stack(columns, axis=-1), names
