"""
Test data helpers: fixture records from JSON/YAML files and date formatting.
"""

import json
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from loguru import logger


def load_records(file_path: Union[str, Path]) -> List[Dict[str, str]]:
    """
    Load a list of records from a JSON or YAML file.

    Values are converted to strings so that every record is a flat
    string-to-string mapping.

    Args:
        file_path: .json, .yaml or .yml file holding a list of objects

    Returns:
        List of records

    Raises:
        ValueError: If the file does not hold a list of objects
    """
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"Expected a list of objects in {path}")

    records = [
        {str(k): "" if v is None else str(v) for k, v in item.items()}
        for item in data
    ]
    logger.debug(f"Loaded {len(records)} records from {path}")
    return records


def current_date(fmt: str = "%d/%m/%Y", today: Optional[date] = None) -> str:
    """Today's date formatted as dd/MM/yyyy by default."""
    return (today or date.today()).strftime(fmt)


__all__ = [
    "current_date",
    "load_records",
]
