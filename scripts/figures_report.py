#!/usr/bin/env python3
"""Dump the category figures persisted by the last successful run to CSV.

Writes: reports/category_figures.csv
"""
import argparse
import sys
from pathlib import Path

import pandas as pd

from crime_watch.config import load_settings
from crime_watch.storage.cache import FIGURES_KEY, CHECKPOINT_KEY, JsonFileCache
from crime_watch.utils.crime_taxonomy import category_group, category_label

ROOT = Path(__file__).resolve().parents[1]
OUT = ROOT / 'reports' / 'category_figures.csv'


def build_rows(figures, checkpoint):
    rows = []
    for category, values in sorted(figures.items()):
        rows.append({
            'category': category,
            'label': category_label(category),
            'group': category_group(category),
            'average': values.get('average'),
            'deviation_percent': values.get('deviation_percent'),
            'checkpoint': checkpoint,
        })
    return rows


def main(argv=None):
    parser = argparse.ArgumentParser(description='Export persisted category figures')
    parser.add_argument('--cache-dir', help='Cache directory (default from CRIME_WATCH_CACHE_DIR)')
    parser.add_argument('--out', default=str(OUT), help='CSV output path')
    args = parser.parse_args(argv)

    cache = JsonFileCache(load_settings(cache_dir=args.cache_dir).cache_dir)
    figures = cache.read(FIGURES_KEY)
    if not figures:
        print('No persisted figures found; run the watcher first.', file=sys.stderr)
        return 2

    df = pd.DataFrame(build_rows(figures, cache.read(CHECKPOINT_KEY)))
    df['deviation_percent'] = pd.to_numeric(df['deviation_percent'], errors='coerce')
    df = df.sort_values('deviation_percent', key=lambda s: s.abs(), ascending=False, na_position='last')
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)
    print('Wrote', out)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
