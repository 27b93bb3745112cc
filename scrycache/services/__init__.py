"""
scrycache services.

Card resolution, decklist parsing and format validation.
"""

from scrycache.services.card_resolver import CardResolver, group_by_oracle_id, pick_by_name
from scrycache.services.deck_parser import (
    DecklistParser,
    ParsedCardLine,
    parse_card_line,
    parse_decklist,
)
from scrycache.services.deck_validator import (
    BASIC_LAND_NAMES,
    UNLIMITED_COPY_NAMES,
    is_basic_land_name,
    is_exempt,
    is_unlimited_copies_name,
    validate,
    validate_constructed,
    validate_four_ofs,
    validate_limited,
    validate_singleton,
)

__all__ = [
    "BASIC_LAND_NAMES",
    "CardResolver",
    "DecklistParser",
    "ParsedCardLine",
    "UNLIMITED_COPY_NAMES",
    "group_by_oracle_id",
    "is_basic_land_name",
    "is_exempt",
    "is_unlimited_copies_name",
    "parse_card_line",
    "parse_decklist",
    "pick_by_name",
    "validate",
    "validate_constructed",
    "validate_four_ofs",
    "validate_limited",
    "validate_singleton",
]
