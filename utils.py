"""
Utility Module for the ACO Load Balancing Simulator

Helpers shared by the CLI and the tests:
- Logging setup driven by LoggingConfig
- Load distribution statistics
- DataExporter for writing traces (JSON) and assignments (CSV)

Author: Student
Date: December 2024
"""

import csv
import json
import logging
import os
from datetime import datetime
from typing import List, Sequence, Dict, Any, Optional

import numpy as np

from config import LoggingConfig, DEFAULT_LOGGING_CONFIG, VERSION, APP_NAME


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(config: LoggingConfig = None, name: str = None) -> logging.Logger:
    """
    Configure the root logger from a LoggingConfig.

    Existing handlers are replaced so repeated calls do not duplicate output.

    Returns:
        Logger named ``name`` (the root logger if None)
    """
    config = config or DEFAULT_LOGGING_CONFIG
    level = logging.DEBUG if config.verbose else logging.INFO
    formatter = logging.Formatter(config.log_format, datefmt=config.date_format)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    if config.log_to_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if config.log_to_file:
        file_handler = logging.FileHandler(config.log_file_path)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    return logging.getLogger(name)


# =============================================================================
# STATISTICS
# =============================================================================

def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean (0 for an empty sequence)."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation (0 for an empty sequence)."""
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


def calculate_load_balance_index(loads: Sequence[float]) -> float:
    """
    Coefficient of variation of the loads.

    0 is a perfectly even spread; larger values mean more imbalance.
    """
    mean = calculate_mean(loads)
    if mean == 0:
        return 0.0
    return calculate_std_dev(loads) / mean


def calculate_jains_fairness_index(loads: Sequence[float]) -> float:
    """
    Jain's fairness index: (sum x)^2 / (n * sum x^2).

    1.0 when every server carries the same load, 1/n when one carries all.
    """
    values = np.asarray(loads, dtype=np.float64)
    if len(values) == 0:
        return 1.0
    squares = float(np.sum(values ** 2))
    if squares == 0:
        return 1.0
    return float(np.sum(values) ** 2 / (len(values) * squares))


def load_summary(loads: Sequence[float]) -> Dict[str, float]:
    """Min/max/mean/std plus balance indices for a load vector."""
    if len(loads) == 0:
        return {'min': 0.0, 'max': 0.0, 'mean': 0.0, 'std': 0.0,
                'range': 0.0, 'load_balance_index': 0.0, 'jains_fairness': 1.0}
    return {
        'min': float(min(loads)),
        'max': float(max(loads)),
        'mean': calculate_mean(loads),
        'std': calculate_std_dev(loads),
        'range': float(max(loads) - min(loads)),
        'load_balance_index': calculate_load_balance_index(loads),
        'jains_fairness': calculate_jains_fairness_index(loads)
    }


# =============================================================================
# EXPORT
# =============================================================================

class DataExporter:
    """Write simulation data to disk."""

    def __init__(self, output_dir: str = "output"):
        self.output_dir = output_dir

    def _resolve(self, path: Optional[str], prefix: str, extension: str) -> str:
        if path is None:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = os.path.join(self.output_dir, f"{prefix}_{stamp}.{extension}")
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return path

    def export_json(self, data: Dict[str, Any], path: str = None) -> str:
        """
        Export a state/trace dictionary as JSON with a small metadata header.

        Returns:
            Path written
        """
        path = self._resolve(path, "aco_trace", "json")
        payload = {
            'metadata': {
                'application': APP_NAME,
                'version': VERSION,
                'exported_at': datetime.now().isoformat(timespec='seconds')
            },
            'data': data
        }
        with open(path, 'w', encoding='utf-8') as handle:
            json.dump(payload, handle, indent=2)
        logging.getLogger(__name__).info(f"Trace exported to {path}")
        return path

    def export_assignments_csv(self, rows: List[Dict[str, Any]], path: str = None) -> str:
        """
        Export assignment rows (batch, order, server, task) as CSV.

        Returns:
            Path written
        """
        path = self._resolve(path, "aco_assignments", "csv")
        fieldnames = ['batch', 'order', 'server', 'task']
        with open(path, 'w', newline='', encoding='utf-8') as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames)
            writer.writeheader()
            for row in rows:
                writer.writerow({key: row.get(key) for key in fieldnames})
        logging.getLogger(__name__).info(f"Assignments exported to {path}")
        return path
