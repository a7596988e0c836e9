"""
CSV file handling for saved probe results.
"""

import csv
from pathlib import Path
from datetime import datetime
from typing import Any
from loguru import logger
from pydantic import BaseModel


class CSVHandler:
    """Append probe results to a CSV file, one row per metric."""

    def __init__(self, csv_file: Path):
        """
        Initialize CSV handler.

        Args:
            csv_file: Path to CSV file
        """
        self.csv_file = csv_file
        self.fieldnames = [
            'timestamp',
            'probe',
            'target',
            'metric',
            'value',
            'status',
            'details',
        ]

        if not csv_file.exists():
            self._create_csv()

    def _create_csv(self):
        """Create CSV file with headers."""
        with open(self.csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            writer.writeheader()

        logger.debug(f"Created CSV file: {self.csv_file}")

    def write_result(
        self,
        timestamp: datetime,
        probe: str,
        target: str,
        metric: str,
        value: Any,
        status: str,
        details: str = "",
    ):
        """
        Write a single metric to CSV.

        Args:
            timestamp: Probe timestamp
            probe: Name of the probe
            target: Host, hostname or device serial
            metric: Metric name
            value: Metric value
            status: success/failure
            details: Additional details
        """
        row = {
            'timestamp': timestamp.isoformat(),
            'probe': probe,
            'target': target,
            'metric': metric,
            'value': str(value),
            'status': status,
            'details': details,
        }

        with open(self.csv_file, 'a', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            writer.writerow(row)

        logger.debug(f"Wrote result to CSV: {metric}={value}")

    def write_record(
        self,
        probe: str,
        target: str,
        record: BaseModel,
        status: str,
        details: str = "",
    ) -> int:
        """
        Write every set field of a result record.

        Returns:
            Number of rows written
        """
        timestamp = datetime.now()
        rows = 0
        for metric, value in record.model_dump(mode="json", exclude_none=True).items():
            if isinstance(value, list):
                value = ";".join(str(v) for v in value)
            self.write_result(timestamp, probe, target, metric, value, status, details)
            rows += 1
        return rows

    def read_results(self) -> list:
        """
        Read all results from CSV.

        Returns:
            List of result dictionaries
        """
        results = []

        if not self.csv_file.exists():
            return results

        with open(self.csv_file, 'r', newline='') as f:
            reader = csv.DictReader(f)
            results = list(reader)

        return results
