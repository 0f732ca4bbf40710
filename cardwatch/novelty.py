"""
Category novelty
Number of distinct merchant categories per account block
"""

from typing import Sequence

from .entities import Block, Transaction


def count_distinct_categories(transactions: Sequence[Transaction], block: Block) -> int:
    """
    Count distinct category values inside one block.

    Categories are copied into a local list, sorted lexicographically and
    scanned for transitions between unequal neighbours. The source sequence
    is never reordered.

    Raises:
        MemoryError: the local working list could not be allocated
    """
    if len(block) == 0:
        return 0

    categories = [transactions[k].category for k in range(block.start, block.end)]
    categories.sort()

    unique = 1
    for k in range(1, len(categories)):
        if categories[k] != categories[k - 1]:
            unique += 1

    return unique
