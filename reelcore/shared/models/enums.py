"""
Enums used across the application.

Every value that arrives from a caller as a string (category, share platform,
sort mode) is parsed into one of these closed types at the boundary.
"""

from enum import Enum


class ContentCategory(str, Enum):
    """
    Fixed set of reel categories.

    Each reel belongs to exactly ONE category for its lifetime (until an
    explicit category change). One CategoryCounter row exists per value.
    """

    INFOTAINMENT = "Infotainment"
    ENTERTAINMENT = "Entertainment"
    NEWS = "News"
    MUSIC = "Music"
    DANCE = "Dance"
    MAKEUP = "Makeup"
    BEAUTY = "Beauty"
    EDITS = "Edits"
    COMEDY = "Comedy"
    SPORTS = "Sports"
    FOOD = "Food"
    TRAVEL = "Travel"
    EDUCATION = "Education"
    TECHNOLOGY = "Technology"


class SharePlatform(str, Enum):
    """Destination a reel was shared to."""

    INTERNAL = "internal"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"
    COPY_LINK = "copy-link"


class FeedSort(str, Enum):
    """
    Feed ordering modes.

    POPULAR has no popularity index behind it and orders like NEWEST.
    """

    NEWEST = "newest"
    OLDEST = "oldest"
    TRENDING = "trending"
    POPULAR = "popular"


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class IndexRelation(str, Enum):
    """How a user is related to a reel in the per-user index."""

    AUTHORED = "authored"
    SAVED = "saved"
    LIKED = "liked"


class InactiveReason(str, Enum):
    """Machine-readable reason recorded when a reel leaves the feeds."""

    MEDIA_MISSING = "media_missing"
    MODERATOR_REMOVED = "moderator_removed"
