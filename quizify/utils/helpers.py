import uuid
from typing import List
from datetime import datetime


def generate_unique_id(prefix: str = "") -> str:
    """
    Generate unique ID

    Args:
        prefix: Optional prefix for the ID

    Returns:
        Unique ID string
    """
    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    random_str = uuid.uuid4().hex[:8]
    unique_id = f"{prefix}_{timestamp}_{random_str}" if prefix else f"{timestamp}_{random_str}"
    return unique_id


def calculate_percentage(part: float, total: float, decimals: int = 1) -> float:
    """Percentage of ``part`` in ``total``; 0 when total is 0"""
    if total == 0:
        return 0.0
    return round(part / total * 100, decimals)


def summarize_messages(messages: List[str], limit: int = 3) -> List[str]:
    """
    Keep the first ``limit`` messages and fold the rest into one line

    Args:
        messages: Messages to summarize
        limit: How many messages to show verbatim

    Returns:
        At most ``limit + 1`` lines
    """
    shown = list(messages[:limit])
    remaining = len(messages) - limit
    if remaining > 0:
        shown.append(f"And {remaining} more...")
    return shown


def sanitize_filename(filename: str, default: str = "document.pdf") -> str:
    """Strip any path components from an uploaded file name"""
    if not filename:
        return default
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return name or default
