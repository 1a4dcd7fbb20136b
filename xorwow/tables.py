# xorwow/tables.py
# Precomputed jump matrices for XORWOW.
#
# step table:        A^(4^0), A^(4^1), A^(4^2), ...
# subsequence table: A^(4^0 * 2^67), A^(4^1 * 2^67), ...
# where A is the one-step transition of the 160-bit xorshift register.
# (4 = 2**config.JUMP_LOG2, 67 = config.SEQUENCE_JUMP_LOG2)
#
# The tables are built once per process (or loaded from an .npz file written
# by `xorwow-tables`) and shared read-only by every engine.  Changing them
# changes every skipped sequence.

import argparse
import functools
import logging
import time

import numpy as np

from . import config
from .gf2 import (MASK32, N_WORDS, STATE_BITS, int_to_words, matrix_from_map,
                  matrix_from_words, matrix_to_words, mul_mat_mat, words_to_int)

logger = logging.getLogger('xorwow.tables')


def xorshift_step(v):
    # one step of the shift register on a state int (the Weyl part is not linear)
    x0, x1, x2, x3, x4 = int_to_words(v)
    t = x0 ^ (x0 >> 2)
    new = (x4 ^ ((x4 << 4) & MASK32)) ^ (t ^ ((t << 1) & MASK32))
    return words_to_int([x1, x2, x3, x4, new])


@functools.lru_cache(maxsize=None)
def transition_matrix():
    return matrix_from_map(xorshift_step)


def square_times(m, times):
    # m^(2^times)
    for _ in range(times):
        m = mul_mat_mat(m, m)
    return m


def build_table(start_log2, depth, log2):
    """Matrices A^(2^(start_log2 + log2*i)) for i in range(depth)."""
    if depth < 1:
        raise ValueError(f"table depth must be at least 1, got {depth}")
    m = square_times(transition_matrix(), start_log2)
    table = [m]
    for _ in range(depth - 1):
        m = square_times(m, log2)
        table.append(m)
    return tuple(table)


@functools.lru_cache(maxsize=None)
def _load_configured():
    t0 = time.time()
    step, subsequence = load_tables(config.TABLE_FILE)
    logger.info(f"Loaded jump tables from {config.TABLE_FILE} in {time.time() - t0:.2f}s")
    return step, subsequence


@functools.lru_cache(maxsize=None)
def step_matrices():
    if config.TABLE_FILE:
        return _load_configured()[0]
    t0 = time.time()
    table = build_table(0, config.JUMP_MATRICES, config.JUMP_LOG2)
    logger.info(f"Generated {len(table)} step jump matrices in {time.time() - t0:.2f}s")
    return table


@functools.lru_cache(maxsize=None)
def sequence_matrices():
    if config.TABLE_FILE:
        return _load_configured()[1]
    t0 = time.time()
    table = build_table(config.SEQUENCE_JUMP_LOG2, config.JUMP_MATRICES, config.JUMP_LOG2)
    logger.info(f"Generated {len(table)} subsequence jump matrices in {time.time() - t0:.2f}s")
    return table


def table_to_array(table):
    return np.array([matrix_to_words(m) for m in table], dtype='<u4')


def table_from_array(arr):
    arr = np.asarray(arr)
    if arr.ndim != 2 or arr.shape[1] != STATE_BITS * N_WORDS:
        raise ValueError(f"jump table must have shape (n, {STATE_BITS * N_WORDS}), got {arr.shape}")
    if arr.shape[0] == 0:
        raise ValueError("jump table is empty")
    return tuple(matrix_from_words(int(w) for w in row) for row in arr)


def save_tables(path, step, subsequence, log2=None):
    if log2 is None:
        log2 = config.JUMP_LOG2
    np.savez(path, step=table_to_array(step), subsequence=table_to_array(subsequence),
             log2=np.array(log2))


def load_tables(path):
    with np.load(path) as data:
        if 'step' not in data.files or 'subsequence' not in data.files:
            raise ValueError(f"{path} does not contain 'step' and 'subsequence' tables")
        step = table_from_array(data['step'])
        subsequence = table_from_array(data['subsequence'])
        log2 = int(data['log2']) if 'log2' in data.files else config.JUMP_LOG2
    if log2 != config.JUMP_LOG2:
        raise ValueError(f"{path} was generated with JUMP_LOG2={log2}, configured {config.JUMP_LOG2}")
    if len(step) != len(subsequence):
        raise ValueError(f"table depths differ: {len(step)} step vs {len(subsequence)} subsequence")
    return step, subsequence


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate XORWOW jump tables')
    parser.add_argument('--out', default='xorwow_tables.npz', help='output .npz path')
    parser.add_argument('--depth', type=int, default=config.JUMP_MATRICES, help='matrices per table')
    parser.add_argument('--log2', type=int, default=config.JUMP_LOG2, help='log2 of the ratio between entries')
    args = parser.parse_args(argv)
    if args.depth < 1:
        parser.error(f"--depth must be at least 1, got {args.depth}")

    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    t0 = time.time()
    step = build_table(0, args.depth, args.log2)
    subsequence = build_table(config.SEQUENCE_JUMP_LOG2, args.depth, args.log2)
    save_tables(args.out, step, subsequence, log2=args.log2)
    logger.info(f"Wrote {args.depth}x2 jump matrices to {args.out} in {time.time() - t0:.2f}s")


if __name__ == '__main__':
    main()
