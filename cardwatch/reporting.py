"""
Run reporting
Console summary + append-only CSV results log
"""
import logging
import os
from typing import List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, computed_field

from .config import RunConfig
from .constants import RESULTS_CSV_HEADER
from .entities import DetectionResult

logger = logging.getLogger(__name__)


class FailedBlock(BaseModel):
    """Block whose category count could not be computed"""
    model_config = ConfigDict(frozen=True)

    block_index: int
    account_id: int
    reason: str


class RunReport(BaseModel):
    """
    Result record of one detection run
    chunk_size 0 = implementation default granularity
    """
    model_config = ConfigDict(frozen=True)

    row_count: int
    burst_count: int
    category_count: int
    elapsed_seconds: float
    worker_count: int
    scheduling_kind: str
    chunk_size: int
    failed_blocks: List[FailedBlock] = []

    @computed_field
    @property
    def degraded(self) -> bool:
        return len(self.failed_blocks) > 0

    @classmethod
    def from_result(cls, result: DetectionResult, config: RunConfig,
                    elapsed_seconds: float, worker_count: Optional[int] = None) -> 'RunReport':
        """Combine engine totals with the knobs that produced them"""
        return cls(
            row_count=result.row_count,
            burst_count=result.burst_count,
            category_count=result.category_count,
            elapsed_seconds=elapsed_seconds,
            worker_count=worker_count if worker_count is not None else config.workers,
            scheduling_kind=config.schedule.value,
            chunk_size=config.chunk_size,
            failed_blocks=[
                FailedBlock(
                    block_index=f.block_index,
                    account_id=f.account_id,
                    reason=f.reason,
                )
                for f in result.failures
            ],
        )

    def to_csv_row(self) -> dict:
        return dict(zip(RESULTS_CSV_HEADER, [
            self.worker_count,
            self.scheduling_kind,
            self.chunk_size,
            f"{self.elapsed_seconds:.6f}",
            self.burst_count,
            self.category_count,
        ]))


def log_summary(report: RunReport) -> None:
    """Print the run summary through logging"""
    logger.info("=" * 60)
    logger.info(f"Rows read: {report.row_count:,}")
    logger.info(f"Threads used: {report.worker_count}")
    logger.info(f"Schedule: {report.scheduling_kind}, Chunk size: {report.chunk_size}")
    logger.info(f"Suspicious (Transaction Frequency): {report.burst_count:,}")
    logger.info(f"Suspicious (Unusual Categories):    {report.category_count:,}")
    logger.info(f"Elapsed: {report.elapsed_seconds:.3f} s")
    if report.degraded:
        logger.warning(f"⚠️ Degraded run: {len(report.failed_blocks)} block(s) missing "
                       f"from the category count")
    logger.info("=" * 60)


def append_results_csv(report: RunReport, path: str) -> None:
    """
    Append one row to the results log.
    Header is written only when the file does not exist yet.
    """
    write_header = not os.path.exists(path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    row = pd.DataFrame([report.to_csv_row()], columns=RESULTS_CSV_HEADER)
    row.to_csv(path, mode="a", header=write_header, index=False)
    logger.info(f"💾 Results appended to: {path}")
