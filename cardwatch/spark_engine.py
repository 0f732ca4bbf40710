"""
Spark execution strategy
Same per-block algorithm, distributed as RDD partitions
Requires the `spark` extra (pyspark)
"""
import logging
import operator

from .config import ScheduleKind
from .engine import (
    ExecutionStrategy,
    chunk_sizes,
    evaluate_payloads,
    make_payload,
    split_chunks,
)
from .entities import BlockTotals

logger = logging.getLogger(__name__)


class SparkStrategy(ExecutionStrategy):
    """
    Chunks of blocks parallelized with `workers` slices; each partition
    computes local partial sums, combined on the driver with `+`.
    """

    def __init__(self, spark=None, workers: int = 2, chunk_size: int = 0):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self._spark = spark
        self.workers = workers
        self.chunk_size = chunk_size

    @property
    def name(self) -> str:
        return "spark"

    @property
    def worker_count(self) -> int:
        return self.workers

    def _get_spark(self):
        if self._spark is not None:
            return self._spark, False

        from pyspark.sql import SparkSession

        spark = SparkSession.builder \
            .appName("CardWatch-Detect") \
            .master(f"local[{self.workers}]") \
            .getOrCreate()
        return spark, True

    def reduce(self, transactions, blocks, window, threshold):
        if not blocks:
            return BlockTotals()

        sizes = chunk_sizes(ScheduleKind.STATIC, len(blocks), self.workers, self.chunk_size)
        payloads = [make_payload(transactions, chunk) for chunk in split_chunks(blocks, sizes)]
        num_slices = max(1, min(self.workers, len(payloads)))

        spark, owned = self._get_spark()
        try:
            logger.debug(f"Spark {spark.version}: {len(payloads)} chunk(s) in {num_slices} slice(s)")
            rdd = spark.sparkContext.parallelize(payloads, num_slices)
            partials = rdd.mapPartitions(
                lambda part: [evaluate_payloads(list(part), window, threshold)]
            )
            return partials.reduce(operator.add)
        finally:
            if owned:
                spark.stop()

