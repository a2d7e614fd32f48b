"""
Script to run dataset updates from the command line

Usage:
    python scripts/run_updater.py cars coe
    python scripts/run_updater.py --all
"""

import argparse
import asyncio
import json
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import dispose_engine
from core.logging import setup_logging
from updater.datasets import DATASETS, get_dataset
from updater.service import run_datasets

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Update LTA DataMall datasets")
    parser.add_argument(
        "datasets",
        nargs="*",
        metavar="DATASET",
        help=f"Datasets to update: {', '.join(DATASETS)}"
    )
    parser.add_argument("--all", action="store_true", help="Update every registered dataset")
    args = parser.parse_args(argv)

    if not args.all and not args.datasets:
        parser.error("name at least one dataset or pass --all")

    unknown = [name for name in args.datasets if name not in DATASETS]
    if unknown:
        parser.error(f"unknown dataset(s): {', '.join(unknown)}")

    return args


async def run_updates(names):
    """Run the named datasets and print one JSON line per dataset. Returns the exit code."""
    descriptors = [get_dataset(name) for name in names]

    try:
        outcomes = await run_datasets(descriptors)
    finally:
        await dispose_engine()

    exit_code = 0
    for descriptor, outcome in zip(descriptors, outcomes):
        if isinstance(outcome, BaseException):
            exit_code = 1
            detail = outcome.to_dict() if hasattr(outcome, "to_dict") else {"message": str(outcome)}
            print(json.dumps({"dataset": descriptor.name, "error": detail}, default=str))
        else:
            print(json.dumps({"dataset": descriptor.name, **outcome.to_json_dict()}))

    return exit_code


def main(argv=None):
    setup_logging()
    args = parse_args(argv)
    names = list(DATASETS) if args.all else args.datasets
    logger.info(f"Running updater for: {', '.join(names)}")
    return asyncio.run(run_updates(names))


if __name__ == "__main__":
    sys.exit(main())
