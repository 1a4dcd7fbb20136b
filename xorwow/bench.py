# xorwow/bench.py
# Time jump-ahead against plain stepping for a range of distances, table
# depths and fallback strategies; every jump is checked against an
# independently computed matrix power.  Results go to a CSV file that
# plotting.py turns into a chart.

import argparse
import csv
import functools
import logging
import os
import time

from . import config
from .engine import XorwowEngine
from .gf2 import int_to_words, mat_pow, mul_mat_vec, words_to_int
from .jump import jump
from .tables import build_table, transition_matrix

logger = logging.getLogger('xorwow.bench')

OUT_DIR = 'results'
STEPPING_MAX = 1 << 16        # largest distance timed by plain stepping
LINEAR_MAX_UNITS = 1 << 16    # largest fallback unit count timed with 'linear'


@functools.lru_cache(maxsize=None)
def shallow_table(depth):
    return build_table(0, depth, config.JUMP_LOG2)


def covered_bits(depth):
    # distance bits the table handles before the fallback kicks in
    return config.JUMP_LOG2 * (depth - 1) + 1


def feasible(distance, strategy, depth):
    if strategy == 'stepping':
        return distance <= STEPPING_MAX
    if strategy == 'linear':
        return (distance >> covered_bits(depth)) <= LINEAR_MAX_UNITS
    return True


def run_single(distance, strategy, depth, seed=0, check=True):
    engine = XorwowEngine(seed)
    x0 = words_to_int(engine.x)
    t0 = time.perf_counter()
    if strategy == 'stepping':
        for _ in range(distance):
            engine.next()
        x = words_to_int(engine.x)
    else:
        x = jump(x0, distance, shallow_table(depth), strategy)
    elapsed = time.perf_counter() - t0

    ok = True
    if check:
        expected = mul_mat_vec(mat_pow(transition_matrix(), distance), x0)
        ok = x == expected
        if not ok:
            logger.error(f"distance={distance} strategy={strategy} depth={depth}: "
                         f"got {int_to_words(x)}, expected {int_to_words(expected)}")
    return ok, elapsed


def run(distances, strategies, depths, trials=3, out_csv=None, check=True):
    if out_csv is None:
        os.makedirs(OUT_DIR, exist_ok=True)
        out_csv = os.path.join(OUT_DIR, f'bench_{int(time.time())}.csv')
    rows = 0
    with open(out_csv, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['distance', 'strategy', 'depth', 'trial', 'seconds', 'ok'])
        for depth in depths:
            for strategy in strategies:
                for distance in distances:
                    if not feasible(distance, strategy, depth):
                        logger.info(f"skip distance={distance} strategy={strategy} depth={depth}")
                        continue
                    for trial in range(trials):
                        ok, elapsed = run_single(distance, strategy, depth, check=check)
                        logger.debug(f"distance={distance} strategy={strategy} depth={depth} "
                                     f"trial={trial} {elapsed:.6f}s ok={ok}")
                        writer.writerow([distance, strategy, depth, trial, f"{elapsed:.6f}", int(ok)])
                        rows += 1
                    f.flush()
    logger.info(f"Wrote {rows} rows to {out_csv}")
    return out_csv


def _int_list(s):
    return [int(x, 0) for x in s.split(',')]


def main(argv=None):
    parser = argparse.ArgumentParser(description='Benchmark XORWOW jump-ahead')
    parser.add_argument('--distances', type=_int_list, default=[1, 64, 4096, 1 << 16, 1 << 32, (1 << 64) - 1],
                        help='comma list')
    parser.add_argument('--strategies', type=lambda s: s.split(','), default=['stepping', 'squaring', 'linear'],
                        help='comma list of stepping,squaring,linear')
    parser.add_argument('--depths', type=_int_list, default=[4, config.JUMP_MATRICES], help='comma list')
    parser.add_argument('--trials', type=int, default=3, help='repeats per combo')
    parser.add_argument('--out', default=None, help='CSV path')
    parser.add_argument('--no-check', action='store_true', help='skip verification against matrix powers')
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    path = run(args.distances, args.strategies, args.depths, args.trials, args.out, check=not args.no_check)
    print("Benchmark complete. CSV saved at:", path)


if __name__ == '__main__':
    main()
