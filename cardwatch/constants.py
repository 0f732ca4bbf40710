"""
Shared constants across ingestion, detection and reporting
"""

# Burst detection: 3 or more transactions within 5 minutes is suspicious
BURST_WINDOW_SEC = 300
BURST_COUNT_THRESHOLD = 3

# Scheduling defaults (chunk 0 = implementation default granularity)
SCHEDULE_KINDS = ["static", "dynamic", "guided"]
DEFAULT_SCHEDULE = "static"
DEFAULT_CHUNK_SIZE = 0

# Execution backends
EXECUTOR_KINDS = ["process", "thread", "sequential", "spark"]
DEFAULT_EXECUTOR = "process"

# Dataset columns, by position in the source CSV
DATASET_COLUMNS = ["account_id", "category", "timestamp", "fraud_label"]
MIN_DATASET_FIELDS = 3

# Signed 64-bit bounds for numeric fields
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Results log
RESULTS_FILENAME = "parallel_results.csv"
RESULTS_CSV_HEADER = [
    "Threads",
    "Schedule",
    "Chunk",
    "ExecutionTime",
    "Suspicious_Burst",
    "Suspicious_Category",
]
