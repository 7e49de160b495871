"""Chain splitting and stratified index splitting.

Split-chain diagnostics subdivide every chain into contiguous blocks so that
drift within a chain shows up as disagreement between blocks.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from .errors import ShapeError


def unique_indices(x: Sequence[Any]) -> tuple[list[Any], list[list[int]]]:
    """Return the sorted distinct values of ``x`` and where each occurs.

    ``indices[i]`` lists, in input order, the positions of ``x`` equal to
    ``unique[i]``.
    """
    positions: dict[Any, list[int]] = {}
    for i, value in enumerate(x):
        positions.setdefault(value, []).append(i)
    unique = sorted(positions)
    return unique, [positions[value] for value in unique]


def split_chain_indices(chain_ids: Sequence[int], split: int = 2) -> np.ndarray:
    """Split each chain in ``chain_ids`` into ``split`` chains.

    Entries belonging to one chain are assumed to be ordered by iteration.
    The result has the same length as ``chain_ids`` and holds the new chain
    id (``1..n_chains * split``) of every draw. Chains are visited in sorted
    id order. When a chain's length ``L`` is not divisible by ``split`` the
    first ``L % split`` blocks get one extra draw, e.g. 4 draws in 3 blocks
    gives ``[[1, 2], [3], [4]]``.
    """
    if split < 1:
        raise ValueError(f"split must be >= 1; got {split}")
    if split == 1:
        return np.array(chain_ids, copy=True)
    out = np.empty(len(chain_ids), dtype=int)
    _, indices = unique_indices(list(chain_ids))
    chain_ind = 0
    for inds in indices:
        per_split, rem = divmod(len(inds), split)
        start = 0
        for j in range(split):
            chain_ind += 1
            stop = start + per_split + (1 if j < rem else 0)
            out[inds[start:stop]] = chain_ind
            start = stop
    return out


def split_chains(x: np.ndarray, split: int = 2) -> np.ndarray:
    """Split a ``(draw, chain[, param])`` array into ``chain * split`` chains.

    Blocks follow :func:`split_chain_indices`. Blocks holding an extra
    draw lose their last one so every block has ``draws // split`` draws.
    Split chains are ordered chain-major: column ``c * split + j`` is block
    ``j`` of chain ``c``.
    """
    if split < 1:
        raise ValueError(f"split must be >= 1; got {split}")
    if split == 1:
        return x
    n_draws, n_chains = x.shape[:2]
    block_len = n_draws // split
    if block_len < 2:
        raise ShapeError(
            f"cannot split {n_draws} draws into {split} chains of at least 2 draws"
        )
    rem = n_draws % split
    # the first `rem` blocks are one draw longer
    starts = np.arange(split) * block_len + np.minimum(np.arange(split), rem)
    blocks = x[starts[:, np.newaxis] + np.arange(block_len)]
    # (split, block_len, chain, ...) -> (block_len, chain, split, ...)
    blocks = np.moveaxis(blocks, 0, 2)
    return blocks.reshape((block_len, n_chains * split) + x.shape[2:])


def shuffle_split_stratified(
    rng: np.random.Generator,
    group_ids: Sequence[Any],
    frac: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Randomly split the indices of ``group_ids`` into two sets.

    ``round(len(group) * frac)`` indices of every group go to the first set
    and the rest to the second, so group proportions are preserved in both.
    """
    if not 0.0 <= frac <= 1.0:
        raise ValueError(f"frac must be in [0, 1]; got {frac}")
    _, indices = unique_indices(group_ids)
    first: list[int] = []
    second: list[int] = []
    for inds in indices:
        n = len(inds)
        n_first = int(round(n * frac))
        perm = rng.permutation(n)
        members = np.asarray(inds)
        first.extend(members[perm[:n_first]].tolist())
        second.extend(members[perm[n_first:]].tolist())
    return np.asarray(first, dtype=int), np.asarray(second, dtype=int)
