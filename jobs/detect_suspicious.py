#!/usr/bin/env python3
"""
Suspicious activity detection job
Usage: python detect_suspicious.py --input-path ../dataset/data.csv --threads 8 --schedule dynamic --chunk-size 100
"""
import argparse
import logging
import sys
import time
from typing import Optional

from cardwatch.config import RunConfig
from cardwatch.constants import RESULTS_FILENAME, SCHEDULE_KINDS, EXECUTOR_KINDS
from cardwatch.engine import run_detection, strategy_from_config
from cardwatch.ingestion import load_transactions, TransactionLoadError
from cardwatch.reporting import RunReport, append_results_csv, log_summary


def setup_logging(verbose: bool = False):
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(message)s',
        level=level,
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def main(input_path: str, workers: Optional[int] = None, schedule: Optional[str] = None,
         chunk_size: Optional[int] = None, window: Optional[int] = None,
         threshold: Optional[int] = None, executor: Optional[str] = None,
         results_path: str = RESULTS_FILENAME) -> int:
    logger = logging.getLogger(__name__)

    try:
        config = RunConfig.from_env(
            workers=workers,
            schedule=schedule,
            chunk_size=chunk_size,
            window_sec=window,
            threshold=threshold,
            executor=executor,
        )
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info("=" * 60)
    logger.info("🔎 Detect Suspicious Activity")
    logger.info("=" * 60)
    logger.info(f"Config: {config.describe()}")

    try:
        loaded = load_transactions(input_path)
    except TransactionLoadError as e:
        logger.error(f"❌ {e}")
        return 1

    # Input is fully materialized before timing begins
    strategy = strategy_from_config(config)
    t0 = time.perf_counter()
    result = run_detection(loaded.transactions, config, strategy)
    elapsed = time.perf_counter() - t0

    report = RunReport.from_result(result, config, elapsed, worker_count=strategy.worker_count)
    log_summary(report)
    append_results_csv(report, results_path)

    logger.info("🎉 Detection complete!")
    return 0


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='CardWatch suspicious activity detection')

    parser.add_argument('--input-path', required=True, help='Transaction dataset (CSV)')
    parser.add_argument('--threads', type=int, default=None,
                        help='Worker count (default: all hardware threads)')
    parser.add_argument('--schedule', choices=SCHEDULE_KINDS, default=None,
                        help='How blocks are handed to workers (default: static)')
    parser.add_argument('--chunk-size', type=int, default=None,
                        help='Blocks per chunk, 0 = default granularity')
    parser.add_argument('--window-sec', type=int, default=None,
                        help='Burst window width in seconds (default: 300)')
    parser.add_argument('--threshold', type=int, default=None,
                        help='Minimum transactions in the window (default: 3)')
    parser.add_argument('--executor', choices=EXECUTOR_KINDS, default=None,
                        help='Execution backend (default: process)')
    parser.add_argument('--results-path', default=RESULTS_FILENAME,
                        help='Append-only results CSV')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.verbose)

    sys.exit(main(
        args.input_path,
        workers=args.threads,
        schedule=args.schedule,
        chunk_size=args.chunk_size,
        window=args.window_sec,
        threshold=args.threshold,
        executor=args.executor,
        results_path=args.results_path,
    ))
