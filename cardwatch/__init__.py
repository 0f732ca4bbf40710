"""
CardWatch Analytics
Batch burst / category-novelty detection over per-account transaction logs
"""

from .entities import Transaction, Block, BlockResult, BlockFailure, BlockTotals, DetectionResult
from .config import RunConfig, ScheduleKind
from .partitioner import partition_blocks
from .burst import count_burst_starts
from .novelty import count_distinct_categories
from .engine import (
    ExecutionStrategy,
    SequentialStrategy,
    PoolStrategy,
    evaluate_block,
    run_detection,
    strategy_from_config,
)
from .ingestion import load_transactions, LoadedTransactions, TransactionLoadError
from .reporting import RunReport, append_results_csv, log_summary

__all__ = [
    "Transaction",
    "Block",
    "BlockResult",
    "BlockFailure",
    "BlockTotals",
    "DetectionResult",
    "RunConfig",
    "ScheduleKind",
    "partition_blocks",
    "count_burst_starts",
    "count_distinct_categories",
    "ExecutionStrategy",
    "SequentialStrategy",
    "PoolStrategy",
    "evaluate_block",
    "run_detection",
    "strategy_from_config",
    "load_transactions",
    "LoadedTransactions",
    "TransactionLoadError",
    "RunReport",
    "append_results_csv",
    "log_summary",
]
