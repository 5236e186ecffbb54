"""
Boundary parsing for caller-supplied values.

Strings from query parameters and request bodies are turned into closed
enum types here; anything outside the enum is an InvalidArgumentError.
"""

from enum import Enum
from typing import Iterable, Optional, Type, TypeVar, Union

from reelcore.shared.core.exceptions import InvalidArgumentError


EnumType = TypeVar("EnumType", bound=Enum)

MAX_TAG_LENGTH = 30


def parse_enum(
    enum_cls: Type[EnumType],
    value: Union[str, EnumType, None],
    field: str,
) -> Optional[EnumType]:
    """
    Parse ``value`` into ``enum_cls``; None passes through.

    Example:
        parse_enum(ContentCategory, "Food", "category")  → ContentCategory.FOOD
        parse_enum(ContentCategory, "Cars", "category")  → InvalidArgumentError
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid {field} '{value}'",
            details={"field": field, "allowed": [member.value for member in enum_cls]},
        )


def normalize_tags(tags: Union[str, Iterable[str], None]) -> list[str]:
    """
    Lowercase, trim and de-duplicate tags, preserving first-seen order.

    Accepts a list or a comma-separated string. Empty entries are dropped.

    Raises:
        InvalidArgumentError: A tag longer than 30 characters
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")

    normalized: list[str] = []
    for raw in tags:
        tag = raw.strip().lower()
        if not tag or tag in normalized:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise InvalidArgumentError(
                f"Tag '{tag}' exceeds {MAX_TAG_LENGTH} characters",
                details={"field": "tags"},
            )
        normalized.append(tag)
    return normalized
