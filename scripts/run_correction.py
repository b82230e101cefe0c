#!/usr/bin/env python3
"""
Run correction script - Correct isotopic overlaps of a quantified peak table.

Loads the peaks from CSV, runs the isotopic overlap correction with the
settings of a YAML configuration file and writes the corrected areas.

Usage:
    # Default settings
    python scripts/run_correction.py peaks.csv

    # Settings from YAML (section 'isotope_correction')
    python scripts/run_correction.py peaks.csv --config correction.yaml

    # Custom output location
    python scripts/run_correction.py peaks.csv -o results/corrected.csv

Example config:
    isotope_correction:
      max_isotopes: 4
      coarse_mz_tolerance: 0.02
      use_most_overlapping_isotope_only: false
"""

import argparse
from datetime import datetime
from pathlib import Path

from isocorr.core.config import CorrectionConfig, load_config
from isocorr.core.dataIO import load_peak_table, store_correction_result
from isocorr.pipelines.correction import run_isotope_correction


def main():
    parser = argparse.ArgumentParser(
        description='Correct isotopic overlaps of quantified lipids',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('peaks', type=Path, help='CSV file with one row per peak')
    parser.add_argument('--config', type=Path, default=None, help='Path to YAML config file')
    parser.add_argument('-o', '--output', type=Path, default=None,
                        help='Output CSV (default: <peaks>_corrected.csv)')
    parser.add_argument('--removed-output', type=Path, default=None,
                        help='Optional CSV listing the removed analytes')
    args = parser.parse_args()

    if args.config is not None:
        print(f"Loading configuration from {args.config}")
        config = load_config(args.config)
    else:
        config = CorrectionConfig()

    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"\n{'='*60}")
    print(f"STARTING CORRECTION: {args.peaks.name}")
    print(f"Time: {timestamp}")
    print(f"{'='*60}\n")

    groups = load_peak_table(args.peaks)
    print(f"Loaded {sum(len(m) for m in groups.values())} analytes in {len(groups)} groups")

    result = run_isotope_correction(groups, config=config)

    output = args.output or args.peaks.with_name(f"{args.peaks.stem}_corrected.csv")
    store_correction_result(result, output, removed_path=args.removed_output)

    print("\n✓ Correction complete")


if __name__ == '__main__':
    main()
