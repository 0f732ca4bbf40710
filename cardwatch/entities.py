"""
Shared entities between ingestion, detectors and the reduction engine
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Transaction:
    """
    Single card transaction
    Maps to one row of the source dataset
    """
    account_id: int
    timestamp: int  # seconds since epoch
    category: str
    fraud_label: bool = False  # informational, never read by detectors


@dataclass(frozen=True)
class Block:
    """
    Maximal run [start, end) of transactions sharing one account_id
    This is the unit of parallel work
    """
    index: int
    account_id: int
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def shifted(self, offset: int) -> 'Block':
        """Same block with its range moved by -offset (for sliced sequences)"""
        return Block(self.index, self.account_id, self.start - offset, self.end - offset)


@dataclass(frozen=True)
class BlockFailure:
    """Recoverable failure while evaluating one block"""
    block_index: int
    account_id: int
    reason: str


@dataclass(frozen=True)
class BlockResult:
    """Outcome of running both detectors over one block"""
    burst_count: int
    category_count: int
    failure: Optional[BlockFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class BlockTotals:
    """
    Partial sums over any set of blocks

    Combined with `+`, which is associative and commutative; BlockTotals()
    is the identity. Failures stay ordered by block index so totals compare
    equal whatever order partials were combined in.
    """
    burst_count: int = 0
    category_count: int = 0
    failures: Tuple[BlockFailure, ...] = field(default_factory=tuple)

    def __add__(self, other: 'BlockTotals') -> 'BlockTotals':
        if not isinstance(other, BlockTotals):
            return NotImplemented
        failures = self.failures + other.failures
        if self.failures and other.failures:
            failures = tuple(sorted(failures, key=lambda f: f.block_index))
        return BlockTotals(
            burst_count=self.burst_count + other.burst_count,
            category_count=self.category_count + other.category_count,
            failures=failures,
        )

    @classmethod
    def from_result(cls, result: BlockResult) -> 'BlockTotals':
        failures = (result.failure,) if result.failure is not None else ()
        return cls(result.burst_count, result.category_count, failures)


@dataclass(frozen=True)
class DetectionResult:
    """Run-wide totals produced by the reduction engine"""
    row_count: int
    block_count: int
    burst_count: int
    category_count: int
    failures: Tuple[BlockFailure, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.failures)
