"""Progress tracking and result export for gallery runs."""

import time
from pathlib import Path
import polars as pl
from ..logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_FORMATS = (".csv", ".parquet", ".json")


def save_dataframe(df: pl.DataFrame, filepath: str) -> None:
    """
    Write a DataFrame in the format implied by the file extension.

    Args:
        df: DataFrame to save
        filepath: Output path ending in .csv, .parquet or .json
    """
    suffix = Path(filepath).suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported file format: {filepath}")

    try:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".csv":
            df.write_csv(filepath)
        elif suffix == ".parquet":
            df.write_parquet(filepath)
        else:
            df.write_json(filepath)

        logger.debug(f"Saved {len(df)} rows to {filepath}")

    except Exception as e:
        logger.error(f"Failed to save results to {filepath}: {e}")
        raise


class ProgressTracker:
    """Track and report progress of the enrichment queue."""

    def __init__(self, total_items: int, report_every: int = 10):
        self.total_items = total_items
        self.report_every = report_every
        self.processed = 0
        self.successful = 0
        self.failed = 0
        self.start_time = time.monotonic()

    def update(self, success: bool = True) -> None:
        """Update progress counters."""
        self.processed += 1
        if success:
            self.successful += 1
        else:
            self.failed += 1

        if self.processed % self.report_every == 0:
            self.report()

    def report(self) -> None:
        """Report current progress."""
        elapsed = time.monotonic() - self.start_time
        rate = self.processed / elapsed if elapsed > 0 else 0

        progress_pct = (self.processed / self.total_items) * 100 if self.total_items else 100.0
        eta_seconds = (self.total_items - self.processed) / rate if rate > 0 else 0

        logger.info(
            f"Progress: {self.processed}/{self.total_items} "
            f"({progress_pct:.1f}%) - "
            f"Success: {self.successful}, Failed: {self.failed} - "
            f"ETA: {eta_seconds:.0f}s"
        )

    def final_report(self) -> None:
        """Report final statistics."""
        elapsed = time.monotonic() - self.start_time

        logger.info(
            f"Completed: {self.processed} items in {elapsed:.1f}s - "
            f"Success: {self.successful}, Failed: {self.failed}"
        )
