"""
Category classification — maps a free-text tile category ("Kitchen Wall",
"TW", "Master bedroom") onto one of the fixed pricing/coverage buckets.

The table below is ordered: specific buckets come before generic ones so
that "Kitchen Wall" never lands in "general wall" and "Bathroom Wall" never
lands in "bedroom" via the bare word "room". First match wins.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple, Optional

from tile_quote.models.enums import CategoryBucket, TileType

logger = logging.getLogger(__name__)


class CategoryRule(NamedTuple):
    bucket: CategoryBucket
    aliases: tuple[str, ...]                 # exact abbreviations, e.g. "tw"
    keyword_groups: tuple[tuple[str, ...], ...]  # every word of one group must appear
    tile_type: TileType


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        CategoryBucket.KITCHEN_WALL, ("kw",),
        (("kitchen", "wall"),),
        TileType.WALL,
    ),
    CategoryRule(
        CategoryBucket.KITCHEN_FLOOR, ("kf",),
        (("kitchen", "floor"),),
        TileType.FLOOR,
    ),
    CategoryRule(
        CategoryBucket.TOILET_WALL, ("tw",),
        (("toilet", "wall"), ("bathroom", "wall"), ("restroom", "wall")),
        TileType.WALL,
    ),
    CategoryRule(
        CategoryBucket.TOILET_FLOOR, ("tf",),
        (("toilet", "floor"), ("bathroom", "floor"), ("restroom", "floor")),
        TileType.FLOOR,
    ),
    CategoryRule(
        CategoryBucket.EXTERNAL_WALL, ("ext",),
        (("external",), ("outside",), ("facade",)),
        TileType.EXTERNAL_WALL,
    ),
    CategoryRule(
        CategoryBucket.STEP, ("step",),
        (("step",), ("stair",)),
        TileType.STEP,
    ),
    CategoryRule(
        CategoryBucket.SITTING_ROOM, ("sr", "lr"),
        (("sitting",), ("living",), ("parlour",), ("dining",)),
        TileType.FLOOR,
    ),
    CategoryRule(
        CategoryBucket.BEDROOM, ("br", "mbr"),
        (("bedroom",), ("guest",), ("master",), ("store",), ("room",)),
        TileType.FLOOR,
    ),
    CategoryRule(
        CategoryBucket.GENERAL_WALL, (),
        (("wall",),),
        TileType.WALL,
    ),
    CategoryRule(
        CategoryBucket.GENERAL_FLOOR, (),
        (("floor",),),
        TileType.FLOOR,
    ),
)

# Unmatched categories are priced and converted as general floor
FALLBACK_BUCKET = CategoryBucket.GENERAL_FLOOR


def normalize_category(category: Optional[str]) -> str:
    """Lowercase, collapse whitespace/punctuation to single spaces."""
    text = (category or "").lower()
    return re.sub(r"[^a-z0-9]+", " ", text).strip()


def match_category(category: Optional[str]) -> Optional[CategoryRule]:
    """Return the first rule matching ``category``, or None."""
    normalized = normalize_category(category)
    if not normalized:
        return None

    for rule in CATEGORY_RULES:
        if normalized in rule.aliases:
            return rule

    for rule in CATEGORY_RULES:
        for group in rule.keyword_groups:
            if all(word in normalized for word in group):
                return rule

    logger.debug(f"No category bucket matched '{category}'; using {FALLBACK_BUCKET.value}")
    return None


def classify_category(category: Optional[str]) -> Optional[CategoryBucket]:
    """Bucket for ``category``; None when nothing matched (caller falls back)."""
    rule = match_category(category)
    return rule.bucket if rule else None
