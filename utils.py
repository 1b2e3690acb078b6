"""
Utility functions for SplitSettle
"""
from __future__ import annotations
import math
import os
from datetime import date, datetime

APP_NAME = "SplitSettle"
HOME_ENV = "SPLITSETTLE_HOME"


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def round_amount(x: float) -> int:
    """Round half-up to a whole currency unit"""
    return int(math.floor(x + 0.5))


def safe_int(x, default: int = 0) -> int:
    """Convert a user-entered number to a whole amount, returning default on error"""
    try:
        return round_amount(float(x))
    except (TypeError, ValueError):
        return default


def format_amount(value: int) -> str:
    """Format a whole amount with thousands separators"""
    return f"{value:,}"


def app_dir() -> str:
    """
    Get application data directory.
    $SPLITSETTLE_HOME wins; otherwise ~/Library/Application Support/SplitSettle.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get(HOME_ENV)
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, APP_NAME)
    os.makedirs(path, exist_ok=True)
    return path
