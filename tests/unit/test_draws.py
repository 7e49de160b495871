from __future__ import annotations

from pathlib import Path

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from mcmc_diag.draws import as_chain_array, check_chain_array, read_draws
from mcmc_diag.errors import InvalidDrawsError, ShapeError


def _make_table() -> pa.Table:
    # rows deliberately out of (chain, draw) order
    return pa.table(
        {
            "chain": pa.array([3, 1, 3, 1, 3, 1, 3, 1], type=pa.int32()),
            "draw": pa.array([1, 0, 0, 3, 3, 2, 2, 1], type=pa.int32()),
            "mu": pa.array([31.0, 10.0, 30.0, 13.0, 33.0, 12.0, 32.0, 11.0]),
            "tau": pa.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]),
        }
    )


def test_as_chain_array_from_table_orders_chains_and_draws() -> None:
    array, names = as_chain_array(_make_table())

    assert names == ["mu", "tau"]
    assert array.shape == (4, 2, 2)
    assert array[:, 0, 0].tolist() == [10.0, 11.0, 12.0, 13.0]
    assert array[:, 1, 0].tolist() == [30.0, 31.0, 32.0, 33.0]


def test_as_chain_array_selects_params() -> None:
    array, names = as_chain_array(_make_table(), params=["tau"])

    assert names == ["tau"]
    assert array.shape == (4, 2, 1)
    assert array[:, 0, 0].tolist() == [2.0, 8.0, 6.0, 4.0]


def test_as_chain_array_accepts_record_batch_reader() -> None:
    table = _make_table()
    reader = pa.RecordBatchReader.from_batches(table.schema, table.to_batches())

    array, _ = as_chain_array(reader)

    assert array.shape == (4, 2, 2)


def test_as_chain_array_rejects_unequal_chains() -> None:
    table = pa.table(
        {
            "chain": pa.array([0, 0, 0, 0, 1, 1, 1, 1, 1]),
            "draw": pa.array([0, 1, 2, 3, 0, 1, 2, 3, 4]),
            "mu": pa.array([1.0] * 9),
        }
    )

    with pytest.raises(ShapeError, match="unequal lengths"):
        as_chain_array(table)


def test_as_chain_array_requires_index_columns() -> None:
    table = pa.table({"chain": pa.array([0, 0, 0, 0]), "mu": pa.array([1.0, 2.0, 3.0, 4.0])})

    with pytest.raises(ShapeError, match="draw"):
        as_chain_array(table)


def test_as_chain_array_from_mapping() -> None:
    source = {"mu": [[1.0, 2.0, 3.0, 4.0], [5.0, 6.0, 7.0, 8.0]]}

    array, names = as_chain_array(source)

    assert names == ["mu"]
    assert array.shape == (4, 2, 1)
    assert array[:, 1, 0].tolist() == [5.0, 6.0, 7.0, 8.0]


def test_as_chain_array_from_numpy_names_parameters() -> None:
    array, names = as_chain_array(np.zeros((10, 3)) + np.arange(10.0)[:, np.newaxis])

    assert names == ["x0"]
    assert array.shape == (10, 3, 1)


def test_as_chain_array_name_count_must_match() -> None:
    with pytest.raises(ShapeError, match="names"):
        as_chain_array(np.ones((10, 2, 2)), params=["a"])


def test_check_chain_array_flags_single_parameter() -> None:
    x, single = check_chain_array(np.ones((5, 2)))

    assert single is True
    assert x.shape == (5, 2, 1)


def test_check_chain_array_rejects_bad_input() -> None:
    with pytest.raises(ShapeError, match="dimensions"):
        check_chain_array(np.ones(10))
    with pytest.raises(ShapeError, match="at least 4 draws"):
        check_chain_array(np.ones((3, 2)))
    with pytest.raises(ShapeError, match="at least 1 chain"):
        check_chain_array(np.ones((5, 0)))
    with pytest.raises(InvalidDrawsError):
        check_chain_array(np.array([[1.0], [np.inf], [2.0], [3.0]]))


def test_read_draws_csv_and_parquet(tmp_path: Path) -> None:
    csv_path = tmp_path / "draws.csv"
    csv_path.write_text("chain,draw,mu\n0,0,1.0\n0,1,2.0\n1,0,1.5\n1,1,2.5\n")
    parquet_path = tmp_path / "draws.parquet"
    pq.write_table(_make_table(), parquet_path)

    assert read_draws(csv_path).column_names == ["chain", "draw", "mu"]
    assert read_draws(parquet_path).num_rows == 8


def test_read_draws_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "draws.txt"
    path.write_text("")

    with pytest.raises(ValueError, match="Unsupported input format"):
        read_draws(path)


def test_ragged_draws_raise_shape_error() -> None:
    ragged = [[1.0, 2.0], [3.0, 4.0], [5.0], [6.0, 7.0]]

    with pytest.raises(ShapeError, match="unequal lengths"):
        check_chain_array(ragged)
    with pytest.raises(ShapeError, match="unequal lengths"):
        as_chain_array(ragged)


def test_as_chain_array_rejects_unknown_params() -> None:
    with pytest.raises(ShapeError, match="unknown parameter"):
        as_chain_array(_make_table(), params=["mu", "b"])
    with pytest.raises(ShapeError, match="unknown parameter"):
        as_chain_array({"mu": [[1.0, 2.0, 3.0, 4.0]]}, params=["b"])
