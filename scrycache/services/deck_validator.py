"""
Decklist Validator.

Pure format-legality checks over a completed Decklist. Every check either
returns None or raises DeckValidationError naming the violated rule and the
actual and limit values.

Copy limits exempt basic lands and a fixed list of cards whose own rules
text allows any number of copies. Both lists are static tables, not derived
from card data.
"""

from scrycache.errors import DeckValidationError, ValidationRule
from scrycache.models.decklist import DeckEntry, Decklist

COPY_LIMIT = 4
SINGLETON_LIMIT = 1

CONSTRUCTED_MIN_MAINDECK = 60
CONSTRUCTED_MAX_SIDEBOARD = 15
LIMITED_MIN_MAINDECK = 40

BASIC_LAND_NAMES: frozenset[str] = frozenset(
    {
        "plains",
        "island",
        "swamp",
        "mountain",
        "forest",
        "snow-covered plains",
        "snow-covered island",
        "snow-covered swamp",
        "snow-covered mountain",
        "snow-covered forest",
        "wastes",
        "snow-covered wastes",
    }
)

# Cards that may be played in any number (or well above four)
UNLIMITED_COPY_NAMES: frozenset[str] = frozenset(
    {
        "relentless rats",
        "shadowborn apostle",
        "rat colony",
        "persistent petitioners",
        "dragon's approach",
        "seven dwarves",
        "nazgûl",
    }
)


def is_basic_land_name(name: str) -> bool:
    """Check if a name is a basic land (case-insensitive)."""
    return name.lower() in BASIC_LAND_NAMES


def is_unlimited_copies_name(name: str) -> bool:
    """Check if a name is on the any-number-of-copies list (case-insensitive)."""
    return name.lower() in UNLIMITED_COPY_NAMES


def is_exempt(name: str) -> bool:
    """Check if a card is exempt from copy limits."""
    return is_basic_land_name(name) or is_unlimited_copies_name(name)


def count_main(deck: Decklist) -> int:
    return deck.count_main()


def count_sideboard(deck: Decklist) -> int:
    return deck.count_sideboard()


def validate(deck: Decklist, min_main: int, max_main: int, max_sideboard: int) -> None:
    """
    Check deck size limits, then the combined four-copy rule.

    Args:
        min_main: Minimum maindeck size
        max_main: Maximum maindeck size, 0 for no maximum
        max_sideboard: Maximum sideboard size

    Raises:
        DeckValidationError: On the first violated rule
    """
    main_total = deck.count_main()
    side_total = deck.count_sideboard()

    if main_total < min_main:
        raise DeckValidationError(
            ValidationRule.MIN_MAINDECK,
            main_total,
            min_main,
            f"maindeck has {main_total} cards, minimum is {min_main}",
        )

    if max_main > 0 and main_total > max_main:
        raise DeckValidationError(
            ValidationRule.MAX_MAINDECK,
            main_total,
            max_main,
            f"maindeck has {main_total} cards, maximum is {max_main}",
        )

    if side_total > max_sideboard:
        raise DeckValidationError(
            ValidationRule.MAX_SIDEBOARD,
            side_total,
            max_sideboard,
            f"sideboard has {side_total} cards, maximum is {max_sideboard}",
        )

    # Copies are summed per name across both sections
    totals: dict[str, int] = {}
    for entry in deck.maindeck + deck.sideboard:
        totals[entry.name] = totals.get(entry.name, 0) + entry.quantity

    for name, total in totals.items():
        if total > COPY_LIMIT and not is_exempt(name):
            raise DeckValidationError(
                ValidationRule.COPY_LIMIT,
                total,
                COPY_LIMIT,
                f"total of {total} copies of {name} between maindeck and sideboard, "
                f"maximum is {COPY_LIMIT}",
                card_name=name,
            )


def validate_constructed(deck: Decklist) -> None:
    """60+ card maindeck, at most 15 in the sideboard, at most 4 of each card."""
    validate(deck, CONSTRUCTED_MIN_MAINDECK, 0, CONSTRUCTED_MAX_SIDEBOARD)
    validate_four_ofs(deck)


def validate_limited(deck: Decklist) -> None:
    """40+ card maindeck and no sideboard."""
    validate(deck, LIMITED_MIN_MAINDECK, 0, 0)


def validate_singleton(deck: Decklist) -> None:
    """Every non-exempt maindeck card at most once."""
    _check_maindeck_copies(deck.maindeck, SINGLETON_LIMIT, ValidationRule.SINGLETON)


def validate_four_ofs(deck: Decklist) -> None:
    """Every non-exempt maindeck card at most four times."""
    _check_maindeck_copies(deck.maindeck, COPY_LIMIT, ValidationRule.COPY_LIMIT)


def _check_maindeck_copies(
    entries: tuple[DeckEntry, ...], limit: int, rule: ValidationRule
) -> None:
    for entry in entries:
        if entry.quantity > limit and not is_exempt(entry.name):
            raise DeckValidationError(
                rule,
                entry.quantity,
                limit,
                f"maindeck has {entry.quantity} copies of {entry.name}, maximum is {limit}",
                card_name=entry.name,
            )
