#!/usr/bin/env python3
"""Estimate reflector height from an NMEA log"""

import argparse
from pathlib import Path

from pygnssir import GnssIrConfig, ObservationStore, estimate_reflector_height, setup_logger
from pygnssir.io import read_nmea_file, write_arc_summary_csv, write_periodograms_csv


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("nmea_file", help="NMEA log with GGA and GSV sentences")
    parser.add_argument("--preset", default="batch", help="configuration preset")
    parser.add_argument("--output-dir", default="results", help="directory for CSV output")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logger(level=args.log_level)
    config = GnssIrConfig.preset(args.preset)

    store = ObservationStore(read_nmea_file(args.nmea_file, config),
                             capacity=config.store_capacity)
    result = estimate_reflector_height(store, config)

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    write_periodograms_csv(result.arcs, out_dir / "arc_freqs.csv")
    write_arc_summary_csv(result.arcs, out_dir / "arc_summary.csv")

    est = result.estimate
    print(f"Reflector height: {est.mean_height_m:.3f} m "
          f"(std {est.stddev_m:.3f} m, {est.contributing_arcs} arcs)")


if __name__ == "__main__":
    main()
