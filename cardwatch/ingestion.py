"""
Dataset ingestion
CSV -> parsed frame -> (account_id, timestamp) order -> Transaction records

Source layout (first line is a header, columns by position):
    account_id, category, timestamp[, fraud_label]
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd

from .constants import DATASET_COLUMNS, MIN_DATASET_FIELDS, INT64_MIN, INT64_MAX
from .entities import Transaction

logger = logging.getLogger(__name__)

# Leading quotes/spaces/tabs, then ASCII whitespace, optional sign and base-10 digits; rest ignored
_INT_PREFIX = re.compile(r'^[" \t]*[ \t\n\v\f\r]*([+-]?[0-9]+)')

# Records end at \n only; \r separates fields like a comma
_FIELD_SEPARATORS = ",\r\n"
_FIELD_SPLIT = r"[,\r\n]+"


class TransactionLoadError(RuntimeError):
    """The transaction buffer could not be materialized; no totals are produced"""


@dataclass
class LoadedTransactions:
    """Sorted transaction records plus ingestion counters"""
    transactions: List[Transaction]
    skipped_rows: int = 0

    def __len__(self) -> int:
        return len(self.transactions)


def parse_int64(value) -> int:
    """
    Numeric field contract: strip leading quote/space/tab characters, parse
    the leading base-10 integer, 0 if nothing parses, clamp to int64.
    """
    if value is None:
        return 0
    match = _INT_PREFIX.match(str(value))
    if not match:
        return 0
    return max(INT64_MIN, min(INT64_MAX, int(match.group(1))))


def parse_fraud_label(value) -> bool:
    """Fraud flag is set iff the raw field starts with '1'"""
    return isinstance(value, str) and value.startswith("1")


def _empty_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "account_id": pd.Series([], dtype="int64"),
        "category": pd.Series([], dtype=object),
        "timestamp": pd.Series([], dtype="int64"),
        "fraud_label": pd.Series([], dtype=bool),
    })


def read_transactions_frame(path: str) -> Tuple[pd.DataFrame, int]:
    """
    Read the raw dataset into a typed frame.

    Records end at "\n". Fields are separated by commas or "\r"; runs of
    separators count as one, so empty fields never exist. Fields beyond the fourth are ignored and rows
    with fewer than three fields are dropped and counted.

    Returns:
        (frame with DATASET_COLUMNS, number of skipped rows)
    """
    # Categories are kept as raw text; undecodable bytes survive as surrogates
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        records = f.read().split("\n")
    if records[-1] == "":
        records.pop()
    lines = pd.Series(records[1:], dtype=object)  # skip header

    if lines.empty:
        return _empty_frame(), 0

    raw = lines.str.strip(_FIELD_SEPARATORS).str.split(_FIELD_SPLIT, regex=True, expand=True)
    raw = raw.reindex(columns=range(len(DATASET_COLUMNS)))
    raw.columns = DATASET_COLUMNS

    required = raw[DATASET_COLUMNS[:MIN_DATASET_FIELDS]]
    valid = (required.notna() & required.ne("")).all(axis=1)
    skipped = int((~valid).sum())
    raw = raw[valid]

    frame = pd.DataFrame({
        "account_id": raw["account_id"].map(parse_int64).astype("int64"),
        "category": raw["category"].astype(object),
        "timestamp": raw["timestamp"].map(parse_int64).astype("int64"),
        "fraud_label": raw["fraud_label"].map(parse_fraud_label).astype(bool),
    })
    return frame.reset_index(drop=True), skipped


def sort_transactions(frame: pd.DataFrame) -> pd.DataFrame:
    """Stable sort by (account_id, timestamp), the order the core requires"""
    return frame.sort_values(["account_id", "timestamp"], kind="mergesort", ignore_index=True)


def to_transactions(frame: pd.DataFrame) -> List[Transaction]:
    """Materialize frame rows as Transaction records, in frame order"""
    rows = frame[DATASET_COLUMNS].itertuples(index=False, name=None)
    return [
        Transaction(
            account_id=int(account_id),
            timestamp=int(timestamp),
            category=category,
            fraud_label=bool(fraud_label),
        )
        for account_id, category, timestamp, fraud_label in rows
    ]


def load_transactions(path: str) -> LoadedTransactions:
    """
    Load, parse and sort the dataset at `path`.

    Raises:
        TransactionLoadError: file unreadable or buffer allocation failed
    """
    logger.info(f"📂 Loading from: {path}")
    try:
        frame, skipped = read_transactions_frame(path)
        frame = sort_transactions(frame)
        transactions = to_transactions(frame)
    except MemoryError as e:
        raise TransactionLoadError(f"Unable to allocate transaction buffer for {path}") from e
    except OSError as e:
        raise TransactionLoadError(f"Error opening {path}: {e}") from e

    logger.info(f"✅ Loaded {len(transactions):,} transactions")
    if skipped:
        logger.info(f"Skipped {skipped:,} malformed row(s)")

    return LoadedTransactions(transactions=transactions, skipped_rows=skipped)
