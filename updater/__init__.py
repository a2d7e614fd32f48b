"""
Dataset updater for LTA DataMall vehicle statistics.

Each dataset is a ZIP archive holding one or more CSV files. A run downloads
the archive, skips everything when the selected file is unchanged, and
otherwise inserts only rows whose key is not stored yet.

Modules:
    fetcher: Download and extract ZIP archives
    checksum: SHA-256 fingerprint of the extracted file
    cache: Checksum cache and table update markers
    planner: Key-based deduplication against stored rows
    runner: Updater orchestrator and its state machine
    datasets: Registered LTA datasets
    service: Session wiring and concurrent runs
    scheduler: APScheduler integration for periodic runs

Subpackages:
    transformers: CSV parsing and per-field transforms
    loaders: Destination store and batched persister

Usage:
    from updater.datasets import get_dataset
    from updater.service import run_dataset

    result = await run_dataset(get_dataset("cars"))
    print(result.to_json_dict())

Error Handling:
    Every failure is raised as a subclass of core.exceptions.UpdaterError.
    Nothing is retried inside a run; repeating a failed run is safe.
"""

__all__ = [
    "Updater",
    "ArchiveFetcher",
    "DeduplicationPlanner",
    "BatchedPersister",
    "PostgresStore",
    "run_dataset",
    "run_datasets",
]
