"""Tests for the decklist parser."""

import pytest

from scrycache.errors import (
    AmbiguousCardError,
    DecklistParseError,
    NotFoundError,
    SideboardLimitError,
)
from scrycache.services.card_resolver import CardResolver
from scrycache.services.deck_parser import DecklistParser, parse_card_line, parse_decklist
from tests.stubs import BOLT_ID, MOUNTAIN_ID, StubSearchClient, make_remote


class TestParseCardLine:
    def test_simple_line(self) -> None:
        parsed = parse_card_line("4 Lightning Bolt", 1)

        assert parsed.quantity == 4
        assert parsed.name == "Lightning Bolt"
        assert parsed.set_code is None
        assert parsed.collector_number is None

    def test_set_suffix(self) -> None:
        parsed = parse_card_line("4 Lightning Bolt (2ED) 161", 3)

        assert parsed.name == "Lightning Bolt"
        assert parsed.set_code == "2ED"
        assert parsed.collector_number == "161"
        assert parsed.line_number == 3

    def test_set_code_without_collector_number(self) -> None:
        parsed = parse_card_line("1 Shock (m19)", 1)

        assert parsed.name == "Shock"
        assert parsed.set_code == "M19"
        assert parsed.collector_number is None

    def test_name_with_parentheses(self) -> None:
        """Parentheses inside a name are kept when they are not a set code."""
        parsed = parse_card_line("1 Erase (Not the Urza's Legacy One)", 1)

        assert parsed.name == "Erase (Not the Urza's Legacy One)"
        assert parsed.set_code is None

    def test_name_with_parentheses_and_suffix(self) -> None:
        """Only the last parenthesised group is taken as the set code."""
        parsed = parse_card_line("1 Erase (Not the Urza's Legacy One) (UNH) 6", 1)

        assert parsed.name == "Erase (Not the Urza's Legacy One)"
        assert parsed.set_code == "UNH"
        assert parsed.collector_number == "6"

    def test_collector_number_with_letters(self) -> None:
        parsed = parse_card_line("2 Forest (SLD) 63★", 1)

        assert parsed.collector_number == "63★"

    @pytest.mark.parametrize(
        "line,reason",
        [
            ("Lightning Bolt", "invalid quantity"),
            ("x4 Lightning Bolt", "invalid quantity"),
            ("-1 Lightning Bolt", "invalid quantity"),
            ("0 Lightning Bolt", "must be positive"),
            ("4", "missing card name"),
            ("² Lightning Bolt", "invalid quantity"),
        ],
    )
    def test_malformed_lines(self, line: str, reason: str) -> None:
        with pytest.raises(DecklistParseError, match=reason) as exc_info:
            parse_card_line(line, 7)

        assert exc_info.value.line_number == 7
        assert exc_info.value.line == line


class TestDecklistParser:
    @pytest.fixture
    def parser(self, resolver: CardResolver) -> DecklistParser:
        return DecklistParser(resolver)

    @pytest.mark.asyncio
    async def test_maindeck_and_sideboard(self, parser: DecklistParser) -> None:
        deck = await parser.parse("4 Lightning Bolt\n20 Mountain\n\nSideboard\n3 Pyroblast\n")

        assert deck.count_main() == 24
        assert deck.count_sideboard() == 3
        assert sorted(e.quantity for e in deck.maindeck) == [4, 20]
        assert len(deck.maindeck) == 2

    @pytest.mark.asyncio
    async def test_merges_by_oracle_id(self, parser: DecklistParser) -> None:
        """The same card with and without a set suffix is one entry."""
        deck = await parser.parse("4 Lightning Bolt\n4 Lightning Bolt (2ED) 161\n")

        assert len(deck.maindeck) == 1
        assert deck.quantity_of(BOLT_ID) == 8

    @pytest.mark.asyncio
    async def test_merges_different_spellings(self, parser: DecklistParser) -> None:
        deck = await parser.parse("2 Lightning Bolt\n2 lightning bolt\n")

        assert len(deck.maindeck) == 1
        assert deck.count_main() == 4

    @pytest.mark.asyncio
    async def test_same_card_in_both_sections(self, parser: DecklistParser) -> None:
        """Maindeck and sideboard are counted separately."""
        deck = await parser.parse("3 Lightning Bolt\nSideboard\n1 Lightning Bolt\n")

        assert deck.quantity_of(BOLT_ID) == 3
        assert deck.quantity_of(BOLT_ID, sideboard=True) == 1

    @pytest.mark.asyncio
    async def test_about_and_deck_markers(self, parser: DecklistParser) -> None:
        text = "About\nName Burn\n\nDeck\n4 Lightning Bolt\n20 Mountain\n"

        deck = await parser.parse(text)

        assert deck.count_main() == 24

    @pytest.mark.asyncio
    async def test_markers_ignore_case(self, parser: DecklistParser) -> None:
        deck = await parser.parse("DECK\n4 Lightning Bolt\nsideboard\n2 Pyroblast\n")

        assert deck.count_main() == 4
        assert deck.count_sideboard() == 2

    @pytest.mark.asyncio
    async def test_about_requires_name(self, parser: DecklistParser) -> None:
        with pytest.raises(DecklistParseError, match="Name") as exc_info:
            await parser.parse("About\nDeck\n4 Lightning Bolt\n")

        assert exc_info.value.line_number == 2

    @pytest.mark.asyncio
    async def test_cards_before_deck_marker(self, parser: DecklistParser) -> None:
        decklist = await parser.parse("4 Lightning Bolt\nDeck\n20 Mountain\n")

        assert decklist.count_main() == 24
        assert decklist.count_sideboard() == 0

    @pytest.mark.asyncio
    async def test_deck_twice(self, parser: DecklistParser) -> None:
        with pytest.raises(DecklistParseError, match="already started"):
            await parser.parse("Deck\n4 Lightning Bolt\nDeck\n4 Shock\n")

    @pytest.mark.asyncio
    async def test_deck_after_sideboard(self, parser: DecklistParser) -> None:
        with pytest.raises(DecklistParseError, match="after sideboard"):
            await parser.parse("Sideboard\n2 Pyroblast\nDeck\n4 Lightning Bolt\n")

    @pytest.mark.asyncio
    async def test_sideboard_twice(self, parser: DecklistParser) -> None:
        with pytest.raises(DecklistParseError, match="sideboard appears twice") as exc_info:
            await parser.parse("4 Lightning Bolt\nSideboard\n1 Shock\nSideboard\n1 Pyroblast\n")

        assert exc_info.value.line_number == 4

    @pytest.mark.asyncio
    async def test_sideboard_limit_fails_at_crossing_line(
        self, parser: DecklistParser, client: StubSearchClient
    ) -> None:
        """Parsing stops at the line that takes the sideboard past 15."""
        text = (
            "4 Lightning Bolt\n"
            "Sideboard\n"
            "4 Pyroblast\n"
            "4 Shock\n"
            "4 Counterspell\n"
            "4 Relentless Rats\n"
            "4 Island\n"
        )

        with pytest.raises(SideboardLimitError, match="sideboard exceeds 15 cards") as exc_info:
            await parser.parse(text)

        assert exc_info.value.line_number == 6
        assert exc_info.value.total == 16
        # The line after the crossing one is never resolved
        assert "Island" not in client.calls_to("search_by_exact_name")

    @pytest.mark.asyncio
    async def test_sideboard_of_exactly_fifteen(self, parser: DecklistParser) -> None:
        deck = await parser.parse(
            "4 Lightning Bolt\nSideboard\n4 Pyroblast\n4 Shock\n4 Counterspell\n3 Island\n"
        )

        assert deck.count_sideboard() == 15

    @pytest.mark.asyncio
    async def test_malformed_line_aborts(self, parser: DecklistParser) -> None:
        with pytest.raises(DecklistParseError) as exc_info:
            await parser.parse("4 Lightning Bolt\nLightning Bolt\n")

        assert exc_info.value.line_number == 2

    @pytest.mark.asyncio
    async def test_unknown_card_aborts(self, parser: DecklistParser) -> None:
        """One unresolvable line fails the whole parse."""
        with pytest.raises(NotFoundError) as exc_info:
            await parser.parse("4 Lightning Bolt\n4 Not A Real Card\n")

        assert any("line 2" in note for note in exc_info.value.__notes__)

    @pytest.mark.asyncio
    async def test_ambiguous_card_aborts(
        self, parser: DecklistParser, client: StubSearchClient
    ) -> None:
        client.queries["Lightning"] = [
            make_remote("Lightning Bolt", BOLT_ID),
            make_remote("Lightning Helix", "helix"),
        ]

        with pytest.raises(AmbiguousCardError):
            await parser.parse("4 Lightning\n")

    @pytest.mark.asyncio
    async def test_resolved_lines_use_the_store(
        self, parser: DecklistParser, client: StubSearchClient
    ) -> None:
        """A card already in the store is resolved without remote calls."""
        await parser.parse("20 Mountain\n")
        client.calls.clear()

        deck = await parser.parse("4 Mountain\n")

        assert deck.quantity_of(MOUNTAIN_ID) == 4
        assert client.call_count == 0


class TestBlankLines:
    """Blank and whitespace-only lines are ignored in every section."""

    @pytest.fixture
    def parser(self, resolver: CardResolver) -> DecklistParser:
        return DecklistParser(resolver)

    @pytest.mark.asyncio
    async def test_before_deck(self, parser: DecklistParser) -> None:
        deck = await parser.parse("\n\n   \nDeck\n4 Lightning Bolt\n")

        assert deck.count_main() == 4

    @pytest.mark.asyncio
    async def test_after_about_preamble(self, parser: DecklistParser) -> None:
        deck = await parser.parse("About\nName Burn\n\n\n4 Lightning Bolt\n")

        assert deck.count_main() == 4

    @pytest.mark.asyncio
    async def test_inside_deck(self, parser: DecklistParser) -> None:
        """A blank line inside the deck does not open the sideboard."""
        deck = await parser.parse("Deck\n4 Lightning Bolt\n\n20 Mountain\n")

        assert deck.count_main() == 24
        assert deck.count_sideboard() == 0

    @pytest.mark.asyncio
    async def test_inside_sideboard(self, parser: DecklistParser) -> None:
        deck = await parser.parse("4 Lightning Bolt\nSideboard\n2 Pyroblast\n\n  \n1 Shock\n\n")

        assert deck.count_sideboard() == 3

    @pytest.mark.asyncio
    async def test_windows_line_endings(self, parser: DecklistParser) -> None:
        deck = await parser.parse("4 Lightning Bolt\r\n\r\nSideboard\r\n3 Pyroblast\r\n")

        assert deck.count_main() == 4
        assert deck.count_sideboard() == 3

    @pytest.mark.asyncio
    async def test_empty_text(self, parser: DecklistParser) -> None:
        deck = await parser.parse("")

        assert deck.count_main() == 0
        assert deck.count_sideboard() == 0


class TestExportRoundTrip:
    @pytest.mark.asyncio
    async def test_round_trip_keeps_counts(self, resolver: CardResolver) -> None:
        """Exported text parses back to the same quantities."""
        original = await parse_decklist(
            resolver,
            "About\nName Burn\nDeck\n4 Lightning Bolt (M11) 146\n4 Lightning Bolt\n"
            "16 Mountain\n\nSideboard\n3 Pyroblast\n2 Shock\n",
        )

        reparsed = await parse_decklist(resolver, original.to_text())

        assert reparsed.count_main() == original.count_main() == 24
        assert reparsed.count_sideboard() == original.count_sideboard() == 5
        assert reparsed.to_text() == original.to_text()

    @pytest.mark.asyncio
    async def test_round_trip_without_sideboard(self, resolver: CardResolver) -> None:
        original = await parse_decklist(resolver, "4 Shock\n")

        reparsed = await parse_decklist(resolver, original.to_text())

        assert reparsed.count_main() == 4
        assert reparsed.count_sideboard() == 0
