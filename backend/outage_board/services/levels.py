"""Derived trust and severity tiers.

Confidence comes from how many people reported the same outage; crisis level
from how many outages are ongoing right now.
"""

import math


def confidence_level(confirm_count: int) -> str:
    if confirm_count >= 3:
        return "confirmed"
    if confirm_count == 2:
        return "likely"
    return "unverified"


def crisis_level(ongoing_count: int) -> str:
    if ongoing_count >= 10:
        return "Critical"
    if ongoing_count >= 5:
        return "High"
    if ongoing_count >= 2:
        return "Moderate"
    return "Normal"


def round_half_up(value: float) -> int:
    """Round .5 upward; built-in round() rounds half to even."""
    return math.floor(value + 0.5)
