#!/usr/bin/env python

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
A command line interface for vecsum

The benchmark itself is configured through the environment (or vecsum.yaml):

    VECSUM_PATH=/bench/doubles.bin VECSUM_PASSES=3 VECSUM_TYPE=local python -m vecsum
"""

import argparse
import logging
import sys

from vecsum.__version__ import __version__
from vecsum.driver import main as run_benchmark


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Sum a file of doubles and report read throughput")
    parser.add_argument("--config", type=str, default=None, help="Configuration file to read.")

    # Mutually exclusive group for `--stats` and `--no-stats`
    stats_group = parser.add_mutually_exclusive_group()
    stats_group.add_argument(
        "--stats", dest="stats", action="store_true", default=False, help="Report read statistics."
    )
    stats_group.add_argument(
        "--no-stats", dest="stats", action="store_false", help="Disable read statistics."
    )
    parser.add_argument("--version", action="version", version=f"vecsum {__version__}")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s %(message)s"
    )

    return run_benchmark(config_file=args.config, report_statistics=args.stats)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
