"""
tests/test_dataset.py

Pytest unit tests for the append-only JSON Lines dataset.

Coverage
--------
- Single and batch appends, write order
- Empty batches
- Concurrent appends from threads
- CSV export
- Clean start versus appending to an earlier run
"""

from __future__ import annotations

import csv
import threading

from dataset import Dataset


class TestPushData:
    def test_appends_in_order(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))

        dataset.push_data({"asin": "A"})
        dataset.push_data([{"asin": "B"}, {"asin": "C"}])

        assert [r["asin"] for r in dataset.read_records()] == ["A", "B", "C"]
        assert dataset.count == 3

    def test_creates_missing_directory(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "Outputs" / "run" / "dataset.jsonl"))

        dataset.push_data({"asin": "A"})

        assert (tmp_path / "Outputs" / "run" / "dataset.jsonl").exists()

    def test_empty_batch_writes_nothing(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))

        dataset.push_data([])

        assert dataset.read_records() == []
        assert not (tmp_path / "dataset.jsonl").exists()

    def test_keeps_non_ascii_and_nulls(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))

        dataset.push_data({"title": "Café crème", "price": None})

        assert dataset.read_records() == [{"title": "Café crème", "price": None}]
        assert "Café" in (tmp_path / "dataset.jsonl").read_text(encoding="utf-8")

    def test_concurrent_appends(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))

        def push(worker: int) -> None:
            for i in range(50):
                dataset.push_data({"worker": worker, "i": i})

        threads = [threading.Thread(target=push, args=(w,)) for w in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        records = dataset.read_records()
        assert len(records) == 200
        assert dataset.count == 200
        assert {(r["worker"], r["i"]) for r in records} == {(w, i) for w in range(4) for i in range(50)}


class TestExportCsv:
    def test_union_of_columns(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))
        dataset.push_data([
            {"type": "search_result", "asin": "A", "price": "19.99"},
            {"type": "error", "url": "https://www.amazon.com/x", "error": "boom"},
        ])

        csv_path = dataset.export_csv()

        assert csv_path == str(tmp_path / "dataset.csv")
        with open(csv_path, newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert set(rows[0]) == {"type", "asin", "price", "url", "error"}
        assert rows[0]["price"] == "19.99"
        assert rows[1]["error"] == "boom"

    def test_empty_dataset_exports_nothing(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "dataset.jsonl"))

        assert dataset.export_csv() is None
        assert not (tmp_path / "dataset.csv").exists()


class TestCleanStart:
    def test_default_appends_to_existing_records(self, tmp_path) -> None:
        path = str(tmp_path / "dataset.jsonl")
        Dataset(path).push_data({"asin": "OLD"})

        dataset = Dataset(path)
        dataset.push_data({"asin": "NEW"})

        assert [r["asin"] for r in dataset.read_records()] == ["OLD", "NEW"]

    def test_clean_drops_records_from_an_earlier_run(self, tmp_path) -> None:
        path = str(tmp_path / "dataset.jsonl")
        earlier = Dataset(path)
        earlier.push_data({"asin": "OLD"})
        earlier.export_csv()

        dataset = Dataset(path, clean=True)

        assert dataset.read_records() == []
        assert not (tmp_path / "dataset.csv").exists()

        dataset.push_data({"asin": "NEW"})

        assert [r["asin"] for r in dataset.read_records()] == ["NEW"]
        assert dataset.count == 1

    def test_clean_without_existing_file(self, tmp_path) -> None:
        dataset = Dataset(str(tmp_path / "run" / "dataset.jsonl"), clean=True)

        assert dataset.read_records() == []
        assert (tmp_path / "run").is_dir()
