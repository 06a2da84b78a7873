"""Shared validation utilities"""

import math
from typing import Optional

PRIORITIES = ("Low", "Medium", "High", "Urgent")


def validate_price(price: float) -> float:
    """Line item prices are non-negative finite amounts, stored with cent precision"""
    try:
        value = float(price)
    except (TypeError, ValueError) as e:
        raise ValueError("Price must be a number") from e

    if math.isnan(value) or math.isinf(value):
        raise ValueError("Price must be a finite number")
    if value < 0:
        raise ValueError("Price cannot be negative")
    return round(value, 2)


def validate_progress(progress: Optional[int]) -> Optional[int]:
    if progress is None:
        return progress
    if progress < 0 or progress > 100:
        raise ValueError("Progress must be between 0 and 100")
    return progress


def validate_priority(priority: Optional[str]) -> str:
    """Normalize priority casing; missing priority defaults to Medium"""
    if not priority:
        return "Medium"
    for allowed in PRIORITIES:
        if allowed.lower() == priority.strip().lower():
            return allowed
    raise ValueError(f"Priority must be one of: {', '.join(PRIORITIES)}")
