"""
Burst detection
Counts start positions whose trailing window holds at least T transactions
"""

from typing import Sequence

from .entities import Block, Transaction


def count_burst_starts(transactions: Sequence[Transaction], block: Block,
                       window: int, threshold: int) -> int:
    """
    Count qualifying start positions inside one block.

    A start s qualifies when the run of contiguous transactions beginning at
    s with timestamp - a[s].timestamp <= window has length >= threshold.
    Overlapping windows are counted once per start, so one cluster of five
    transactions can yield several qualifying starts.

    Two-pointer scan: `end` never moves backwards, O(len(block)) time.

    Args:
        transactions: full sorted sequence (read only)
        block: range to scan
        window: window width in seconds, inclusive
        threshold: minimum number of transactions in the window

    Returns:
        Number of qualifying start positions
    """
    i, j = block.start, block.end
    if j - i < threshold:
        return 0

    count = 0
    end = i
    for start in range(i, j):
        start_time = transactions[start].timestamp
        while end < j and transactions[end].timestamp - start_time <= window:
            end += 1
        if end - start >= threshold:
            count += 1

    return count
