# xorwow/plotting.py
"""
Plot benchmark timings: x axis = skip distance, y axis = mean seconds,
one line per (strategy, table depth).

CSV expected columns (as written by bench.py): distance, strategy, depth, trial, seconds, ok

Usage:
    python -m xorwow.plotting --csv results/bench_XXXX.csv --out timings.png
"""

import argparse
import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

REQUIRED = {'distance', 'strategy', 'depth', 'trial', 'seconds', 'ok'}


def prepare_pivot(df):
    # mean seconds for each (series, distance); rows = distance, cols = series
    df = df.copy()
    df['series'] = df['strategy'] + '/depth=' + df['depth'].astype(str)
    agg = df.groupby(['series', 'distance'], as_index=False)['seconds'].mean()
    pivot = agg.pivot(index='distance', columns='series', values='seconds')
    return pivot.sort_index()


def plot_timings(pivot, title='XORWOW jump-ahead timings', out_file=None):
    fig, ax = plt.subplots(figsize=(8, 5))
    # distances reach 2**64, beyond float64 integers but fine for a log axis
    distances = np.array([float(d) for d in pivot.index])
    for series in pivot.columns:
        values = pivot[series].to_numpy(dtype=float)
        mask = ~np.isnan(values)
        ax.plot(distances[mask], values[mask], marker='o', label=series)

    ax.set_xscale('log', base=2)
    ax.set_yscale('log')
    ax.set_xlabel('Skip distance (outputs)')
    ax.set_ylabel('Mean time (s)')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, which='both', alpha=0.3)

    fig.tight_layout()
    if out_file:
        os.makedirs(os.path.dirname(out_file) or '.', exist_ok=True)
        fig.savefig(out_file, dpi=150)
        print(f"Plot saved to {out_file}")
    else:
        plt.show()
    return fig


def load_results(path):
    df = pd.read_csv(path)
    if not REQUIRED.issubset(set(df.columns)):
        raise ValueError(f"CSV must contain columns: {sorted(REQUIRED)}. Found: {df.columns.tolist()}")
    # distances up to 2**64 - 1 do not fit int64
    df['distance'] = df['distance'].apply(int)
    df['depth'] = df['depth'].astype(int)
    df['seconds'] = df['seconds'].astype(float)
    return df


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument('--csv', required=True, help='Path to benchmark CSV')
    parser.add_argument('--out', default='results/timings.png', help='Output PNG path')
    parser.add_argument('--title', default='XORWOW jump-ahead timings', help='Plot title')
    args = parser.parse_args(argv)

    try:
        df = load_results(args.csv)
    except ValueError as e:
        raise SystemExit(str(e))
    plot_timings(prepare_pivot(df), title=args.title, out_file=args.out)


if __name__ == '__main__':
    main()
