"""
Reduction engine
Runs both detectors over every block and sums per-block results

One per-block algorithm (evaluate_block) shared by every execution strategy:
- SequentialStrategy: blocks in index order
- PoolStrategy: concurrent.futures pool, static / dynamic / guided chunking
- SparkStrategy (spark_engine): RDD partitions, optional `spark` extra

Totals are identical across strategies; worker count, schedule and chunk
size only affect wall-clock time.
"""
import logging
import math
import operator
from abc import ABC, abstractmethod
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from functools import reduce
from typing import List, Optional, Sequence, Tuple

from .burst import count_burst_starts
from .config import RunConfig, ScheduleKind
from .entities import (
    Block,
    BlockFailure,
    BlockResult,
    BlockTotals,
    DetectionResult,
    Transaction,
)
from .novelty import count_distinct_categories
from .partitioner import partition_blocks

logger = logging.getLogger(__name__)

# (transactions, blocks indexing into them)
Payload = Tuple[Sequence[Transaction], List[Block]]


# ============================================================================
# Per-block algorithm
# ============================================================================

def evaluate_block(transactions: Sequence[Transaction], block: Block,
                   window: int, threshold: int) -> BlockResult:
    """
    Run burst and category detectors over one block.

    A MemoryError while building the category working list is contained
    here: the block reports its burst count, contributes 0 categories and
    carries a BlockFailure instead of aborting the run.
    """
    burst = count_burst_starts(transactions, block, window, threshold)
    try:
        categories = count_distinct_categories(transactions, block)
    except MemoryError:
        return BlockResult(
            burst_count=burst,
            category_count=0,
            failure=BlockFailure(
                block_index=block.index,
                account_id=block.account_id,
                reason=f"category working list allocation failed ({len(block)} rows)",
            ),
        )
    return BlockResult(burst_count=burst, category_count=categories)


def evaluate_blocks(transactions: Sequence[Transaction], blocks: Sequence[Block],
                    window: int, threshold: int) -> BlockTotals:
    """Local partial sums over a set of blocks"""
    totals = BlockTotals()
    for block in blocks:
        totals = totals + BlockTotals.from_result(
            evaluate_block(transactions, block, window, threshold)
        )
    return totals


def evaluate_payloads(payloads: Sequence[Payload], window: int, threshold: int) -> BlockTotals:
    """Worker entry point: partial sums over every chunk assigned to one task"""
    return reduce(
        operator.add,
        (evaluate_blocks(txns, blocks, window, threshold) for txns, blocks in payloads),
        BlockTotals(),
    )


# ============================================================================
# Chunking
# ============================================================================

def chunk_sizes(schedule: ScheduleKind, block_count: int, workers: int,
                chunk_size: int = 0) -> List[int]:
    """
    Sizes (in blocks) of the contiguous chunks handed to workers.

    static:  chunk_size, or ceil(n / workers) when 0
    dynamic: chunk_size, or 1 when 0
    guided:  ceil(remaining / workers), shrinking, never below chunk_size (or 1)
    """
    if block_count == 0:
        return []

    if schedule is ScheduleKind.GUIDED:
        minimum = max(chunk_size, 1)
        sizes = []
        remaining = block_count
        while remaining > 0:
            size = min(max(math.ceil(remaining / workers), minimum), remaining)
            sizes.append(size)
            remaining -= size
        return sizes

    if chunk_size > 0:
        size = chunk_size
    elif schedule is ScheduleKind.STATIC:
        size = math.ceil(block_count / workers)
    else:
        size = 1

    full, rest = divmod(block_count, size)
    return [size] * full + ([rest] if rest else [])


def split_chunks(blocks: Sequence[Block], sizes: Sequence[int]) -> List[List[Block]]:
    chunks = []
    pos = 0
    for size in sizes:
        chunks.append(list(blocks[pos:pos + size]))
        pos += size
    return chunks


def make_payload(transactions: Sequence[Transaction], chunk: List[Block],
                 copy: bool = True) -> Payload:
    """
    Package a chunk for a worker.

    With copy=True the worker gets only its own slice of transactions and
    blocks rebased to it (needed when the payload crosses a process
    boundary); otherwise the shared sequence is passed as is.
    """
    if not copy or not chunk:
        return transactions, chunk
    lo, hi = chunk[0].start, chunk[-1].end
    return list(transactions[lo:hi]), [block.shifted(lo) for block in chunk]


# ============================================================================
# Strategies
# ============================================================================

class ExecutionStrategy(ABC):
    """How blocks are distributed; never what is computed for them"""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def worker_count(self) -> int:
        pass

    @abstractmethod
    def reduce(self, transactions: Sequence[Transaction], blocks: Sequence[Block],
               window: int, threshold: int) -> BlockTotals:
        pass


class SequentialStrategy(ExecutionStrategy):
    """Blocks in index order, single accumulator"""

    @property
    def name(self) -> str:
        return "sequential"

    @property
    def worker_count(self) -> int:
        return 1

    def reduce(self, transactions, blocks, window, threshold):
        return evaluate_blocks(transactions, blocks, window, threshold)


class PoolStrategy(ExecutionStrategy):
    """
    Fork-join over a fixed-size concurrent.futures pool

    static:  chunks dealt round-robin to workers up front, one task per worker
    dynamic: one task per chunk, taken by whichever worker is free
    guided:  like dynamic, with chunks shrinking as work runs out
    """

    def __init__(self, workers: int, schedule: ScheduleKind = ScheduleKind.STATIC,
                 chunk_size: int = 0, executor: str = "process"):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if chunk_size < 0:
            raise ValueError(f"chunk_size must be >= 0, got {chunk_size}")
        if executor not in ("process", "thread"):
            raise ValueError(f"Unknown pool executor: {executor}")
        self.workers = workers
        self.schedule = schedule
        self.chunk_size = chunk_size
        self.executor = executor

    @property
    def name(self) -> str:
        return f"{self.executor}-pool"

    @property
    def worker_count(self) -> int:
        return self.workers

    def build_tasks(self, transactions: Sequence[Transaction],
                    blocks: Sequence[Block]) -> List[List[Payload]]:
        """Group blocks into the task list a pool will execute"""
        sizes = chunk_sizes(self.schedule, len(blocks), self.workers, self.chunk_size)
        copy = self.executor == "process"
        payloads = [make_payload(transactions, chunk, copy) for chunk in split_chunks(blocks, sizes)]

        if self.schedule is ScheduleKind.STATIC:
            tasks = [payloads[w::self.workers] for w in range(self.workers)]
            return [task for task in tasks if task]
        return [[payload] for payload in payloads]

    def _make_executor(self):
        if self.executor == "thread":
            return ThreadPoolExecutor(max_workers=self.workers)
        return ProcessPoolExecutor(max_workers=self.workers)

    def reduce(self, transactions, blocks, window, threshold):
        tasks = self.build_tasks(transactions, blocks)
        if not tasks:
            return BlockTotals()

        logger.debug(f"Dispatching {len(tasks)} task(s) over {len(blocks)} blocks "
                     f"to {self.workers} {self.executor} worker(s) ({self.schedule.value})")

        totals = BlockTotals()
        with self._make_executor() as pool:
            futures = [pool.submit(evaluate_payloads, task, window, threshold) for task in tasks]
            for future in as_completed(futures):
                totals = totals + future.result()
        return totals


def strategy_from_config(config: RunConfig) -> ExecutionStrategy:
    """Factory for the execution strategy named by config.executor"""
    if config.executor == "sequential":
        return SequentialStrategy()
    if config.executor == "spark":
        from .spark_engine import SparkStrategy
        return SparkStrategy(workers=config.workers, chunk_size=config.chunk_size)
    return PoolStrategy(
        workers=config.workers,
        schedule=config.schedule,
        chunk_size=config.chunk_size,
        executor=config.executor,
    )


# ============================================================================
# Entry point
# ============================================================================

def run_detection(transactions: Sequence[Transaction],
                  config: Optional[RunConfig] = None,
                  strategy: Optional[ExecutionStrategy] = None) -> DetectionResult:
    """
    Partition the sorted sequence and reduce both detectors over all blocks.

    Args:
        transactions: sequence sorted by (account_id, timestamp)
        config: window / threshold and scheduling knobs (defaults if None)
        strategy: overrides the strategy named by config

    Returns:
        DetectionResult with both totals and any per-block failures
    """
    config = config or RunConfig()
    strategy = strategy or strategy_from_config(config)

    blocks = partition_blocks(transactions)
    logger.debug(f"{len(transactions)} rows -> {len(blocks)} blocks, "
                 f"strategy={strategy.name}, workers={strategy.worker_count}")

    totals = strategy.reduce(transactions, blocks, config.window_sec, config.threshold)

    if totals.failures:
        logger.warning(f"⚠️ {len(totals.failures)} block(s) degraded, "
                       f"category count excludes them")
        for failure in totals.failures:
            logger.warning(f"   block {failure.block_index} (account {failure.account_id}): "
                           f"{failure.reason}")

    return DetectionResult(
        row_count=len(transactions),
        block_count=len(blocks),
        burst_count=totals.burst_count,
        category_count=totals.category_count,
        failures=totals.failures,
    )
