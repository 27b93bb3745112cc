"""
Card Models.

CardRecord is the oracle-level identity of a logical card. PrintingRecord is
one physical printing of it. Card is the read-time aggregate handed to
callers: a CardRecord plus every stored printing, newest first.

INVARIANTS:
- At most one CardRecord per oracle_id (case-insensitive)
- A Card always carries at least one printing
- All models are frozen (immutable after construction)
"""

from dataclasses import dataclass, field
from datetime import datetime


def normalize_oracle_id(oracle_id: str) -> str:
    """Oracle ids compare case-insensitively; this is the stored key form."""
    return oracle_id.strip().lower()


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    Oracle-level card data, independent of printing.

    Attributes:
        oracle_id: Scryfall oracle ID (stable across printings)
        name: Canonical card name
        type_line: Full type line (e.g., "Creature — Human Wizard")
        layout: Scryfall layout (normal, split, transform, ...)
        cmc: Mana value
        colors: Color letters (W, U, B, R, G)
        color_identity: Color identity letters
    """

    oracle_id: str
    name: str
    type_line: str
    layout: str
    cmc: float = 0.0
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    mana_cost: str | None = None
    oracle_text: str | None = None
    power: str | None = None
    toughness: str | None = None
    keywords: tuple[str, ...] = ()
    legalities: dict[str, str] = field(default_factory=dict)
    prints_search_uri: str | None = None


@dataclass(frozen=True, slots=True)
class PrintingRecord:
    """
    One printing of a card in one set/language.

    Attributes:
        printing_id: Scryfall card id (unique per printing)
        oracle_id: The CardRecord this printing belongs to
        image_uri: Display image (normal, else small, else large)
        released_at: ISO date string, used for newest-first ordering
    """

    printing_id: str
    oracle_id: str
    set_code: str
    set_name: str
    rarity: str
    scryfall_uri: str
    released_at: str
    games: tuple[str, ...] = ()
    image_uri: str | None = None
    collector_number: str | None = None
    lang: str | None = None
    arena_id: int | None = None


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card with its full printing history.

    Printings are ordered by release date, newest first. A CardRecord with
    no stored printings is not fully resolved and cannot become a Card.
    """

    record: CardRecord
    printings: tuple[PrintingRecord, ...]

    def __post_init__(self) -> None:
        if not self.printings:
            raise ValueError(f"Card {self.record.name} has no printings")

    @property
    def oracle_id(self) -> str:
        return self.record.oracle_id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def type_line(self) -> str:
        return self.record.type_line

    @property
    def mana_cost(self) -> str | None:
        return self.record.mana_cost

    @property
    def oracle_text(self) -> str | None:
        return self.record.oracle_text

    @property
    def colors(self) -> tuple[str, ...]:
        return self.record.colors

    @property
    def latest_printing(self) -> PrintingRecord:
        return self.printings[0]

    def set_codes(self) -> set[str]:
        """All set codes this card was printed in."""
        return {p.set_code for p in self.printings}


@dataclass(frozen=True, slots=True)
class InsertionResult:
    """
    Result of storing a card and its printing history.

    Printing-history failures do not fail the insertion; each one is
    recorded in warnings instead.
    """

    card: Card
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """True if every printing was stored without a recorded failure."""
        return len(self.warnings) == 0


@dataclass(frozen=True, slots=True)
class QueryCacheEntry:
    """A query string and the ordered oracle ids it last resolved to."""

    query_text: str
    oracle_ids: tuple[str, ...]
    cached_at: datetime | None = None
    last_accessed: datetime | None = None
    hit_count: int = 0


@dataclass(frozen=True, slots=True)
class QueryCacheStats:
    """Aggregate query cache bookkeeping."""

    total_queries: int
    total_hits: int
    average_hits: float
