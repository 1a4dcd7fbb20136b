import numpy as np
import pytest

from xorwow import config, tables
from xorwow.gf2 import mat_pow
from xorwow.tables import (build_table, load_tables, save_tables, sequence_matrices,
                           square_times, step_matrices, table_from_array, table_to_array,
                           transition_matrix)


def test_shallow_table_powers(shallow_table):
    a = transition_matrix()
    assert shallow_table[0] == a
    assert shallow_table[1] == mat_pow(a, 4)
    assert shallow_table[2] == mat_pow(a, 16)


def test_step_table_shape():
    table = step_matrices()
    assert len(table) == config.JUMP_MATRICES
    assert table[0] == transition_matrix()
    assert table[1] == mat_pow(transition_matrix(), 4)


def test_sequence_table_starts_at_one_subsequence():
    table = sequence_matrices()
    assert len(table) == config.JUMP_MATRICES
    one = square_times(transition_matrix(), config.SEQUENCE_JUMP_LOG2)
    assert table[0] == one
    assert table[1] == square_times(one, config.JUMP_LOG2)


def test_tables_are_shared():
    assert step_matrices() is step_matrices()
    assert sequence_matrices() is sequence_matrices()


def test_array_layout(shallow_table):
    arr = table_to_array(shallow_table)
    assert arr.shape == (3, 800)
    assert arr.dtype == np.dtype('<u4')
    assert table_from_array(arr) == shallow_table


def test_table_from_array_rejects_bad_shape():
    with pytest.raises(ValueError):
        table_from_array(np.zeros((2, 799), dtype=np.uint32))


def test_save_and_load(tmp_path, shallow_table):
    path = tmp_path / "tables.npz"
    save_tables(path, shallow_table, shallow_table[::-1])
    step, subsequence = load_tables(path)
    assert step == shallow_table
    assert subsequence == shallow_table[::-1]


def test_load_rejects_other_log2(tmp_path, shallow_table):
    path = tmp_path / "tables.npz"
    save_tables(path, shallow_table, shallow_table, log2=config.JUMP_LOG2 + 1)
    with pytest.raises(ValueError, match="JUMP_LOG2"):
        load_tables(path)


def test_load_rejects_missing_table(tmp_path, shallow_table):
    path = tmp_path / "tables.npz"
    np.savez(path, step=table_to_array(shallow_table))
    with pytest.raises(ValueError):
        load_tables(path)


def test_load_rejects_mismatched_depths(tmp_path, shallow_table):
    path = tmp_path / "tables.npz"
    save_tables(path, shallow_table, shallow_table[:2])
    with pytest.raises(ValueError, match="depths"):
        load_tables(path)


def test_configured_table_file(tmp_path, monkeypatch, shallow_table):
    path = tmp_path / "tables.npz"
    save_tables(path, shallow_table, shallow_table)
    monkeypatch.setattr(config, "TABLE_FILE", str(path))
    tables._load_configured.cache_clear()
    try:
        step, subsequence = tables._load_configured()
    finally:
        tables._load_configured.cache_clear()
    assert step == shallow_table
    assert subsequence == shallow_table


def test_main_writes_tables(tmp_path):
    path = tmp_path / "out.npz"
    tables.main(["--out", str(path), "--depth", "2"])
    step, subsequence = load_tables(path)
    assert step == build_table(0, 2, config.JUMP_LOG2)
    assert subsequence[0] == sequence_matrices()[0]
    assert subsequence[1] == sequence_matrices()[1]


def test_empty_table_rejected():
    with pytest.raises(ValueError, match="empty"):
        table_from_array(np.zeros((0, 800), dtype=np.uint32))


def test_empty_table_file_rejected(tmp_path):
    path = tmp_path / "empty.npz"
    empty = np.zeros((0, 800), dtype=np.uint32)
    np.savez(path, step=empty, subsequence=empty, log2=np.array(config.JUMP_LOG2))
    with pytest.raises(ValueError, match="empty"):
        load_tables(path)


def test_build_table_needs_depth():
    with pytest.raises(ValueError, match="depth"):
        build_table(0, 0, config.JUMP_LOG2)


def test_main_rejects_zero_depth(tmp_path):
    path = tmp_path / "out.npz"
    with pytest.raises(SystemExit):
        tables.main(["--out", str(path), "--depth", "0"])
    assert not path.exists()
