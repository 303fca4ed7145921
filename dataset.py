"""
dataset.py - Append-only JSON Lines record sink

Author      : Breno Farias da Silva
Created     : 2026-10-18
Description :
    Small storage module that provides the Dataset class used as the output
    sink of a scraping run. Every record is appended as one JSON object per
    line, so a run that stops halfway still leaves every written record
    readable. The main exports are:

    - `Dataset.push_data`, which appends one record or a list of records.
    - `Dataset.read_records`, which reads every record back in write order.
    - `Dataset.export_csv`, which flattens the dataset into a CSV file.

Usage:
    from dataset import Dataset
    dataset = Dataset("./Outputs/amazon-scrape/dataset.jsonl")
    dataset.push_data({"asin": "B07XYZ1234", "title": "Shoes"})

Returns:
    Dataset instances; appends return None.

Dependencies:
    - pandas (CSV export)

Notes:
    - Appends are serialized with a lock, so worker threads can share one Dataset.
    - Records are never rewritten once appended.
    - By default an existing file is appended to; `Dataset(path, clean=True)`
      starts from an empty file, which is what a new scraping run uses.
"""


import json  # Serialize records to JSON lines
import os  # Create the dataset directory
import threading  # Serialize appends coming from worker threads
import pandas as pd  # Tabular export of the dataset
from typing import Any, Dict, List, Optional, Union  # Type hinting support for better code clarity


# Classes Definitions:


class Dataset:
    """
    Append-only JSON Lines sink shared by every worker of a run.
    """


    def __init__(self, path: str, clean: bool = False) -> None:
        """
        Prepares the dataset file, creating its directory when needed.

        :param path: Path to the .jsonl file
        :param clean: If True, records left by an earlier run (and its CSV export) are removed
        :return: None
        """

        self.path: str = path  # Store the dataset path
        self.lock = threading.Lock()  # Serialize appends from worker threads
        self.count: int = 0  # Number of records appended by this instance

        directory = os.path.dirname(path)  # Directory holding the dataset
        if directory:  # Only create a directory when the path has one
            os.makedirs(directory, exist_ok=True)

        if clean:  # Start this run from an empty dataset
            for stale_path in (path, os.path.splitext(path)[0] + ".csv"):  # The dataset and its default CSV export
                if os.path.exists(stale_path):
                    os.remove(stale_path)


    def push_data(self, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> None:
        """
        Appends one record or a list of records to the dataset.

        :param data: Record dictionary or list of record dictionaries
        :return: None
        """

        records = data if isinstance(data, list) else [data]  # Normalize to a list
        if not records:  # Nothing to append
            return

        lines = "".join(json.dumps(record, ensure_ascii=False) + "\n" for record in records)  # Serialize before taking the lock

        with self.lock:  # One writer at a time
            with open(self.path, "a", encoding="utf-8") as fh:  # Open in append mode for every batch
                fh.write(lines)
            self.count += len(records)


    def read_records(self) -> List[Dict[str, Any]]:
        """
        Reads every record of the dataset in write order.

        :return: List of record dictionaries (empty if the file does not exist)
        """

        if not os.path.exists(self.path):  # Nothing written yet
            return []

        records: List[Dict[str, Any]] = []  # Initialize empty list for records
        with open(self.path, "r", encoding="utf-8") as fh:  # Open the dataset with UTF-8 encoding
            for line in fh:  # Read each line in the file
                line = line.strip()  # Strip whitespace
                if line:  # Skip blank lines
                    records.append(json.loads(line))

        return records  # Return every record


    def export_csv(self, csv_path: Optional[str] = None) -> Optional[str]:
        """
        Exports the dataset to a CSV file, one column per field seen in any record.

        :param csv_path: Destination path (defaults to the dataset path with a .csv extension)
        :return: Path to the CSV file, or None if the dataset is empty
        """

        records = self.read_records()  # Load every record
        if not records:  # Empty datasets produce no CSV
            return None

        csv_path = csv_path or os.path.splitext(self.path)[0] + ".csv"  # Default to a sibling CSV file
        pd.DataFrame(records).to_csv(csv_path, index=False, encoding="utf-8")  # Columns are the union of all record keys

        return csv_path  # Return the CSV path
