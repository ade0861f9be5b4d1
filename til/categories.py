"""
Fixed set of fact categories and their display colors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ALL_CATEGORIES = "all"
FALLBACK_COLOR = "#78716c"


@dataclass(frozen=True)
class Category:
    name: str
    color: str

    def as_dict(self) -> dict:
        return {"name": self.name, "color": self.color}


CATEGORIES: tuple[Category, ...] = (
    Category("technology", "#3b82f6"),
    Category("science", "#16a34a"),
    Category("finance", "#ef4444"),
    Category("society", "#eab308"),
    Category("entertainment", "#db2777"),
    Category("health", "#14b8a6"),
    Category("history", "#f97316"),
    Category("news", "#8b5cf6"),
)

_BY_NAME = {category.name: category for category in CATEGORIES}

CATEGORY_NAMES: tuple[str, ...] = tuple(_BY_NAME)


def get_category(name: str | None) -> Optional[Category]:
    if not name:
        return None
    return _BY_NAME.get(name)


def is_category(name: str | None) -> bool:
    return get_category(name) is not None


def category_color(name: str | None) -> str:
    """Return the display color, falling back to a neutral gray for unknown labels."""
    category = get_category(name)
    return category.color if category else FALLBACK_COLOR


def normalize_filter(value: str | None) -> Optional[str]:
    """
    Map a filter value from a query string to a category name.

    ``None``, the empty string and ``"all"`` mean no filter. Raises
    ValueError for anything that is not a known category.
    """
    if value is None:
        return None
    value = value.strip().lower()
    if value in ("", ALL_CATEGORIES):
        return None
    if not is_category(value):
        raise ValueError(f"Unknown category: {value}")
    return value
