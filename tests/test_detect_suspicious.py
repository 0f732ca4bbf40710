"""
Tests for detect_suspicious.py job
Tests the actual job logic with realistic data
"""
import os
import sys

import pandas as pd
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'jobs'))

from conftest import build_transactions


def write_dataset(path, transactions):
    """Write transactions in the source layout, deliberately unsorted."""
    rows = [f"{t.account_id},{t.category},{t.timestamp},{int(t.fraud_label)}" for t in reversed(transactions)]
    with open(path, "w") as f:
        f.write("cc_num,category,unix_time,is_fraud\n")
        f.write("\n".join(rows) + "\n")


class TestDetectSuspicious:
    """Tests for detect_suspicious.py job"""

    def test_job_imports(self):
        """✅ Job imports work."""
        from detect_suspicious import main, parse_args
        assert main is not None
        assert parse_args is not None

    def test_end_to_end_sample(self, sample_dataset, temp_dir):
        """✅ Sample dataset: 8 rows, 4 burst starts, 5 categories."""
        from detect_suspicious import main

        results = os.path.join(temp_dir, "parallel_results.csv")
        code = main(sample_dataset, workers=2, schedule="dynamic", chunk_size=1,
                    executor="thread", results_path=results)

        assert code == 0
        df = pd.read_csv(results)
        assert len(df) == 1
        row = df.iloc[0]
        assert row["Threads"] == 2
        assert row["Schedule"] == "dynamic"
        assert row["Chunk"] == 1
        assert row["Suspicious_Burst"] == 4
        assert row["Suspicious_Category"] == 5
        assert row["ExecutionTime"] >= 0

    def test_runs_append_to_same_log(self, temp_dir):
        """✅ Repeated runs with different knobs append identical totals."""
        from detect_suspicious import main

        dataset = os.path.join(temp_dir, "data.csv")
        write_dataset(dataset, build_transactions(seed=7, accounts=25))
        results = os.path.join(temp_dir, "parallel_results.csv")

        assert main(dataset, executor="sequential", results_path=results) == 0
        for schedule in ["static", "dynamic", "guided"]:
            assert main(dataset, workers=4, schedule=schedule, executor="thread",
                        results_path=results) == 0
        assert main(dataset, workers=2, schedule="guided", executor="process",
                    results_path=results) == 0

        df = pd.read_csv(results)
        assert len(df) == 5
        assert df["Suspicious_Burst"].nunique() == 1
        assert df["Suspicious_Category"].nunique() == 1
        assert list(df["Threads"]) == [1, 4, 4, 4, 2]

    def test_window_and_threshold_flags(self, sample_dataset, temp_dir):
        """✅ W and T flow from job arguments into the detector."""
        from detect_suspicious import main

        results = os.path.join(temp_dir, "results.csv")
        assert main(sample_dataset, window=60, threshold=2, executor="sequential",
                    results_path=results) == 0

        # account 1: (100,150) (400,450); account 2: none within 60s
        assert pd.read_csv(results).iloc[0]["Suspicious_Burst"] == 2

    def test_empty_dataset(self, temp_dir):
        """✅ Header-only dataset completes with zero totals."""
        from detect_suspicious import main

        dataset = os.path.join(temp_dir, "empty.csv")
        with open(dataset, "w") as f:
            f.write("cc_num,category,unix_time,is_fraud\n")
        results = os.path.join(temp_dir, "results.csv")

        assert main(dataset, executor="thread", workers=2, results_path=results) == 0

        row = pd.read_csv(results).iloc[0]
        assert row["Suspicious_Burst"] == 0
        assert row["Suspicious_Category"] == 0

    def test_non_utf8_dataset_completes(self, temp_dir):
        """✅ Latin-1 category bytes do not abort the job."""
        from detect_suspicious import main

        dataset = os.path.join(temp_dir, "latin1.csv")
        with open(dataset, "wb") as f:
            f.write(b"cc_num,category,unix_time,is_fraud\n"
                    b"1,caf\xe9,100,0\n1,gas,150,0\n1,caf\xe9,200,0\n")
        results = os.path.join(temp_dir, "results.csv")

        assert main(dataset, executor="sequential", results_path=results) == 0

        row = pd.read_csv(results).iloc[0]
        assert row["Suspicious_Burst"] == 1
        assert row["Suspicious_Category"] == 2

    def test_missing_dataset_fails_without_totals(self, temp_dir):
        """✅ Fatal load error: exit 1, nothing appended."""
        from detect_suspicious import main

        results = os.path.join(temp_dir, "results.csv")
        code = main(os.path.join(temp_dir, "nope.csv"), results_path=results)

        assert code == 1
        assert not os.path.exists(results)

    def test_invalid_config_fails(self, sample_dataset, temp_dir):
        """✅ Invalid knobs: exit 1 before loading."""
        from detect_suspicious import main

        results = os.path.join(temp_dir, "results.csv")

        assert main(sample_dataset, workers=0, results_path=results) == 1
        assert main(sample_dataset, threshold=0, results_path=results) == 1
        assert not os.path.exists(results)

    def test_parse_args(self):
        """✅ CLI flags map onto job arguments."""
        from detect_suspicious import parse_args

        args = parse_args(["--input-path", "data.csv", "--threads", "8", "--schedule", "dynamic",
                           "--chunk-size", "100", "--window-sec", "600", "--threshold", "4",
                           "--executor", "thread"])

        assert args.input_path == "data.csv"
        assert args.threads == 8
        assert args.schedule == "dynamic"
        assert args.chunk_size == 100
        assert args.window_sec == 600
        assert args.threshold == 4
        assert args.executor == "thread"
        assert args.results_path == "parallel_results.csv"

    def test_parse_args_defaults(self):
        """✅ Unset flags stay None so env/config defaults apply."""
        from detect_suspicious import parse_args

        args = parse_args(["--input-path", "data.csv"])

        assert args.threads is None
        assert args.schedule is None
        assert args.chunk_size is None
        assert not args.verbose

    def test_rejects_unknown_schedule(self):
        """✅ Unknown schedule is a usage error."""
        from detect_suspicious import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--input-path", "data.csv", "--schedule", "auto"])
