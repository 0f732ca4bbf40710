# tests/conftest.py

import pytest
import os
import sys
import random
import tempfile
import shutil

# 🔧 Fix Python version mismatch
os.environ['PYSPARK_PYTHON'] = sys.executable
os.environ['PYSPARK_DRIVER_PYTHON'] = sys.executable

from cardwatch.entities import Transaction

CATEGORIES = ["gas_transport", "grocery_pos", "shopping_net", "travel", "entertainment",
              "food_dining", "health_fitness", "misc_pos"]


@pytest.fixture(scope="session")
def spark():
    """Create SparkSession for tests (skipped without pyspark / Java)."""
    pytest.importorskip("pyspark")
    from pyspark.sql import SparkSession

    try:
        spark = SparkSession.builder \
            .appName("test") \
            .master("local[*]") \
            .config("spark.driver.memory", "1g") \
            .config("spark.sql.shuffle.partitions", "2") \
            .getOrCreate()
    except Exception as e:
        pytest.skip(f"Spark session unavailable: {e}")

    spark.sparkContext.setLogLevel("WARN")
    yield spark
    spark.stop()


@pytest.fixture(scope="function")
def temp_dir():
    """Temporary directory for test outputs."""
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


def build_transactions(seed: int = 42, accounts: int = 40, max_rows: int = 60):
    """Sorted synthetic transactions with bursty and quiet accounts."""
    rng = random.Random(seed)
    transactions = []
    base_time = 1_325_376_000  # 2012-01-01

    for account in range(accounts):
        account_id = 4_000_000_000_000 + account * 7919
        rows = rng.randint(1, max_rows)
        t = base_time + rng.randint(0, 86_400)
        for _ in range(rows):
            # Mix of tight bursts (seconds apart) and quiet gaps (hours apart)
            t += rng.choice([0, 5, 30, 60, 120, 299, 300, 301, 3_600, 86_400])
            transactions.append(Transaction(
                account_id=account_id,
                timestamp=t,
                category=rng.choice(CATEGORIES[:rng.randint(1, len(CATEGORIES))]),
                fraud_label=rng.random() < 0.05,
            ))

    transactions.sort(key=lambda tx: (tx.account_id, tx.timestamp))
    return transactions


@pytest.fixture(scope="session")
def sample_transactions():
    """Generate sample transaction data."""
    return build_transactions()


@pytest.fixture(scope="function")
def sample_dataset(temp_dir):
    """Small CSV dataset in the source layout (unsorted, one malformed row)."""
    path = os.path.join(temp_dir, "transactions.csv")
    lines = [
        "cc_num,category,unix_time,is_fraud",
        "2,gas_transport,1000,0",
        "1,grocery_pos,400,0",
        "1,grocery_pos,100,1",
        "1,travel,150,0",
        "broken_row,only_two_fields",
        "2,gas_transport,1100,0",
        "1,grocery_pos,0,0",
        "2,travel,1200,0",
        "1,gas_transport,450,0",
    ]
    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return path
