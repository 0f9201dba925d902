"""
Location signal for Tempr.

Classifies a free-text place description (reverse-geocoded name, street,
area) into a LocationCategory using ordered keyword patterns.
"""

import re
from typing import List, Optional, Tuple

from tempr.context_logic.context_types import LocationCategory

# Order matters: the first matching pattern wins
PLACE_PATTERNS: List[Tuple[re.Pattern, LocationCategory]] = [
    (re.compile(r"gym|fitness|crossfit|sport", re.IGNORECASE), LocationCategory.GYM),
    (re.compile(r"library|biblioth", re.IGNORECASE), LocationCategory.LIBRARY),
    (re.compile(r"airport|terminal|aviation", re.IGNORECASE), LocationCategory.AIRPORT),
    (re.compile(r"cafe|coffee|starbucks", re.IGNORECASE), LocationCategory.CAFE),
    (re.compile(r"restaurant|diner|bistro", re.IGNORECASE), LocationCategory.RESTAURANT),
    (re.compile(r"bar|pub|lounge|club", re.IGNORECASE), LocationCategory.BAR),
    (re.compile(r"park|garden|trail", re.IGNORECASE), LocationCategory.PARK),
    (re.compile(r"station|metro|subway|bus", re.IGNORECASE), LocationCategory.TRANSIT),
]


def classify_place(place_text: Optional[str]) -> LocationCategory:
    """
    Classify a place description.
    
    Args:
        place_text: Space-joined place name parts, or None when no fix is available
        
    Returns:
        Matching LocationCategory, or UNKNOWN if nothing matched
    """
    if not place_text:
        return LocationCategory.UNKNOWN
    for pattern, category in PLACE_PATTERNS:
        if pattern.search(place_text):
            return category
    return LocationCategory.UNKNOWN


def parse_location_category(value: Optional[str]) -> LocationCategory:
    """Parse an explicit category name (e.g. "home"), UNKNOWN if unrecognised."""
    if not value:
        return LocationCategory.UNKNOWN
    try:
        return LocationCategory(value.strip().lower())
    except ValueError:
        return LocationCategory.UNKNOWN
