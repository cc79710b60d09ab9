"""
PowerAttr Utilities
Unit conversions, charge formatting and file I/O helpers.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union
import logging

import yaml

logger = logging.getLogger(__name__)

MS_PER_HOUR = 1000 * 60 * 60


def us_to_ms(us: int) -> int:
    """Convert microseconds to whole milliseconds (truncating)."""
    return us // 1000


def mams_to_mah(mams: float) -> float:
    """Convert milliamp-milliseconds to milliamp-hours."""
    return mams / float(MS_PER_HOUR)


def format_charge(mah: float) -> str:
    """Format a charge in mAh with precision that suits its magnitude."""
    if mah == 0:
        return "0"
    elif abs(mah) < 0.00001:
        return f"{mah:.8f}"
    elif abs(mah) < 0.01:
        return f"{mah:.5f}"
    elif abs(mah) < 1:
        return f"{mah:.3f}"
    return f"{mah:.1f}"


def format_duration_ms(ms: int) -> str:
    """Format a millisecond duration as human-readable string."""
    seconds = ms / 1000
    if seconds < 1:
        return f"{ms} ms"
    elif seconds < 60:
        return f"{seconds:.2f} s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f} min"
    else:
        return f"{seconds / 3600:.1f} h"


def safe_json_dump(data: Any, path: Union[str, Path], indent: int = 2) -> None:
    """Safely write JSON to file with atomic write pattern."""
    path = Path(path)
    temp_path = path.with_suffix(".tmp")

    try:
        with open(temp_path, "w") as f:
            json.dump(data, f, indent=indent, default=str)
        temp_path.replace(path)
    except Exception as e:
        logger.error(f"Failed to write JSON to {path}: {e}")
        if temp_path.exists():
            temp_path.unlink()
        raise


def load_structured(path: Union[str, Path]) -> Optional[Any]:
    """
    Load a JSON or YAML document.
    Files ending in .json are parsed as JSON, everything else as YAML.
    """
    path = Path(path)
    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)
