"""
Block partitioning
Splits the (account_id, timestamp)-sorted sequence into per-account blocks
"""

from typing import List, Sequence

from .entities import Block, Transaction


def partition_blocks(transactions: Sequence[Transaction]) -> List[Block]:
    """
    Split a sorted transaction sequence into maximal same-account runs.

    Single left-to-right scan: a new block starts wherever account_id
    differs from the previous element, and the last block closes at n.
    The input must already be sorted by (account_id, timestamp); unsorted
    input fragments accounts into several blocks.

    Args:
        transactions: sorted sequence, possibly empty

    Returns:
        Blocks ordered by start, together covering [0, n)
    """
    blocks: List[Block] = []
    n = len(transactions)
    if n == 0:
        return blocks

    start = 0
    for i in range(1, n + 1):
        if i == n or transactions[i].account_id != transactions[i - 1].account_id:
            blocks.append(Block(len(blocks), transactions[start].account_id, start, i))
            start = i

    return blocks
