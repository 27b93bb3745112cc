"""
Decklist aggregate.

A Decklist is two multisets of Cards, keyed by oracle_id. Repeated mentions
of one card (with or without a set-code suffix, or via a different printing)
are accumulated into a single entry by the parser before the Decklist is
built. Once built it is immutable.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from scrycache.models.card import Card


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """A resolved card and how many copies of it a section holds."""

    card: Card
    quantity: int

    @property
    def oracle_id(self) -> str:
        return self.card.oracle_id

    @property
    def name(self) -> str:
        return self.card.name


@dataclass(frozen=True)
class Decklist:
    """
    A maindeck and a sideboard.

    Attributes:
        maindeck: Entries in first-seen order, one per oracle_id
        sideboard: Entries in first-seen order, one per oracle_id
    """

    maindeck: tuple[DeckEntry, ...] = field(default_factory=tuple)
    sideboard: tuple[DeckEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for section_name, section in (("maindeck", self.maindeck), ("sideboard", self.sideboard)):
            oracle_ids = [entry.oracle_id for entry in section]
            if len(oracle_ids) != len(set(oracle_ids)):
                raise ValueError(f"{section_name} has more than one entry per oracle_id")
            for entry in section:
                if entry.quantity <= 0:
                    raise ValueError(f"{entry.name} has non-positive quantity {entry.quantity}")

    def count_main(self) -> int:
        """Total cards in maindeck (4 Lightning Bolts = 4 cards)."""
        return sum(entry.quantity for entry in self.maindeck)

    def count_sideboard(self) -> int:
        """Total cards in sideboard."""
        return sum(entry.quantity for entry in self.sideboard)

    def quantity_of(self, oracle_id: str, sideboard: bool = False) -> int:
        """Copies of a card in one section, 0 if absent."""
        section = self.sideboard if sideboard else self.maindeck
        for entry in section:
            if entry.oracle_id == oracle_id:
                return entry.quantity
        return 0

    def maindeck_cards(self) -> list[Card]:
        """Maindeck flattened to one Card per copy."""
        return list(_expand(self.maindeck))

    def sideboard_cards(self) -> list[Card]:
        """Sideboard flattened to one Card per copy."""
        return list(_expand(self.sideboard))

    def to_text(self) -> str:
        """
        Export in the simple Arena text form.

        One "<quantity> <name>" line per maindeck entry, then a blank line,
        "Sideboard" and the sideboard entries. Set codes are never emitted.
        The output parses back into an equivalent Decklist.
        """
        lines = [f"{entry.quantity} {entry.name}" for entry in self.maindeck]

        if self.sideboard:
            lines.append("")
            lines.append("Sideboard")
            lines.extend(f"{entry.quantity} {entry.name}" for entry in self.sideboard)

        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.to_text()


def _expand(entries: tuple[DeckEntry, ...]) -> Iterator[Card]:
    for entry in entries:
        for _ in range(entry.quantity):
            yield entry.card
