"""
Decklist Parser.

Turns Arena-style decklist text into a Decklist, resolving every card line
through the CardResolver.

Accepted layout:

    About                     optional; if present the next line must start with "Name"
    Name My Deck
    Deck                      optional section marker
    4 Lightning Bolt
    4 Lightning Bolt (2ED) 161
                              blank lines are ignored everywhere
    Sideboard
    3 Pyroblast

A set-code suffix is parsed but never affects which card is resolved;
every Card carries its full printing history regardless.

Any failure aborts the whole parse. No partial Decklist is ever returned.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

from scrycache.errors import CardCacheError, DecklistParseError, SideboardLimitError
from scrycache.models.card import Card
from scrycache.models.decklist import DeckEntry, Decklist
from scrycache.services.card_resolver import CardResolver

logger = logging.getLogger(__name__)

SIDEBOARD_LIMIT = 15

# "<quantity> <rest>"
_QUANTITY_PATTERN = re.compile(r"^(\S+)(?:\s+(.*))?$")

# "<name> (<SET>) [<collector number>]"; the set code must be the last
# parenthesised alphanumeric group so names containing parentheses stay intact
_SUFFIX_PATTERN = re.compile(
    r"^(?P<name>.+?)\s+\((?P<set_code>[A-Za-z0-9]+)\)(?:\s+(?P<collector_number>\S+))?$"
)


@dataclass(frozen=True, slots=True)
class ParsedCardLine:
    """One card line, split into its parts. Not yet resolved."""

    quantity: int
    name: str
    set_code: str | None
    collector_number: str | None
    line_number: int


def parse_card_line(line: str, line_number: int) -> ParsedCardLine:
    """
    Parse `<quantity> <name>[ (<SET>) <collector#>]`.

    Raises:
        DecklistParseError: If the quantity is not a positive integer or the
            name is missing
    """
    stripped = line.strip()
    match = _QUANTITY_PATTERN.match(stripped)
    if not match:
        raise DecklistParseError(line_number, line, "empty card line")

    quantity_str, rest = match.group(1), (match.group(2) or "").strip()

    # str.isdigit() also accepts superscripts and non-Latin digits
    if not (quantity_str.isascii() and quantity_str.isdigit()):
        raise DecklistParseError(line_number, line, f"invalid quantity '{quantity_str}'")
    quantity = int(quantity_str)
    if quantity <= 0:
        raise DecklistParseError(line_number, line, f"quantity must be positive, got {quantity}")

    if not rest:
        raise DecklistParseError(line_number, line, "missing card name")

    suffix = _SUFFIX_PATTERN.match(rest)
    if suffix:
        return ParsedCardLine(
            quantity=quantity,
            name=suffix.group("name").strip(),
            set_code=suffix.group("set_code").upper(),
            collector_number=suffix.group("collector_number"),
            line_number=line_number,
        )

    return ParsedCardLine(
        quantity=quantity,
        name=rest,
        set_code=None,
        collector_number=None,
        line_number=line_number,
    )


class _Section:
    """Quantities keyed by oracle id, in first-seen order."""

    def __init__(self) -> None:
        self.cards: dict[str, Card] = {}
        self.quantities: dict[str, int] = {}

    def add(self, card: Card, quantity: int) -> None:
        if card.oracle_id in self.quantities:
            self.quantities[card.oracle_id] += quantity
        else:
            self.cards[card.oracle_id] = card
            self.quantities[card.oracle_id] = quantity

    def total(self) -> int:
        return sum(self.quantities.values())

    def entries(self) -> tuple[DeckEntry, ...]:
        return tuple(
            DeckEntry(card=self.cards[oracle_id], quantity=quantity)
            for oracle_id, quantity in self.quantities.items()
        )


class DecklistParser:
    """
    Line-oriented decklist parser.

    Usage:
        parser = DecklistParser(resolver)
        decklist = await parser.parse(text)
    """

    def __init__(self, resolver: CardResolver, sideboard_limit: int = SIDEBOARD_LIMIT):
        self._resolver = resolver
        self._sideboard_limit = sideboard_limit

    async def parse(self, text: str, *, timeout: float | None = None) -> Decklist:
        """
        Parse decklist text into a Decklist.

        Raises:
            DecklistParseError: On a malformed line or section structure
            SideboardLimitError: At the line where the sideboard passes the limit
            NotFoundError / AmbiguousCardError: If a card line cannot be resolved
        """
        if timeout is None:
            return await self._parse(text)
        return await asyncio.wait_for(self._parse(text), timeout)

    async def _parse(self, text: str) -> Decklist:
        lines = text.split("\n")
        maindeck = _Section()
        sideboard = _Section()
        in_deck = False
        in_sideboard = False

        start = 0
        if lines and lines[0].strip().lower() == "about":
            name_line = lines[1].strip() if len(lines) > 1 else ""
            if (name_line.split() or [""])[0].lower() != "name":
                raise DecklistParseError(2, name_line, "expected a 'Name' line after 'About'")
            start = 2

        for line_number, raw_line in enumerate(lines[start:], start + 1):
            line = raw_line.strip()

            if not line:
                continue

            lowered = line.lower()
            if lowered == "deck":
                if in_deck:
                    raise DecklistParseError(line_number, line, "deck section already started")
                if in_sideboard:
                    raise DecklistParseError(line_number, line, "deck marker after sideboard")
                in_deck = True
                continue

            if lowered == "sideboard":
                if in_sideboard:
                    raise DecklistParseError(line_number, line, "sideboard appears twice")
                in_sideboard = True
                continue

            parsed = parse_card_line(line, line_number)
            card = await self._resolve(parsed, line)

            if in_sideboard:
                sideboard.add(card, parsed.quantity)
                total = sideboard.total()
                if total > self._sideboard_limit:
                    raise SideboardLimitError(line_number, line, total, self._sideboard_limit)
            else:
                maindeck.add(card, parsed.quantity)

        decklist = Decklist(maindeck=maindeck.entries(), sideboard=sideboard.entries())
        logger.debug(
            "Parsed decklist: %d maindeck, %d sideboard",
            decklist.count_main(),
            decklist.count_sideboard(),
        )
        return decklist

    async def _resolve(self, parsed: ParsedCardLine, line: str) -> Card:
        try:
            return await self._resolver.resolve_decklist_name(parsed.name)
        except CardCacheError as e:
            e.add_note(f"at decklist line {parsed.line_number}: {line}")
            raise


async def parse_decklist(
    resolver: CardResolver, text: str, *, timeout: float | None = None
) -> Decklist:
    """
    Parse decklist text.

    This is a convenience function that creates a parser and parses.
    """
    parser = DecklistParser(resolver)
    return await parser.parse(text, timeout=timeout)
