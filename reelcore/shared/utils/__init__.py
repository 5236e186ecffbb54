"""
Utilities Package

Contents:
=========
- time: UTC clock used by windowed engagement rules
- validation: enum parsing and tag normalisation at the boundary
"""

from reelcore.shared.utils.time import Clock, utcnow
from reelcore.shared.utils.validation import normalize_tags, parse_enum

__all__ = [
    "Clock",
    "utcnow",
    "normalize_tags",
    "parse_enum",
]
