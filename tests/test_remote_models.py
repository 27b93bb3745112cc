"""Tests for Scryfall record models."""

import pytest

from scrycache.errors import MalformedRecordError
from scrycache.models.remote import RemoteCard, RemoteList
from tests.stubs import make_remote, remote_card_data


class TestRemoteCard:
    def test_parses_scryfall_json(self) -> None:
        """The `set` key maps to set_code and unknown keys are ignored."""
        card = RemoteCard.model_validate(
            remote_card_data("Lightning Bolt", "BOLT", "p1", "lea", reprint=False)
        )

        assert card.set_code == "lea"
        assert card.name == "Lightning Bolt"

    def test_card_record_normalizes_oracle_id(self) -> None:
        """Stored oracle ids are lower-case."""
        record = make_remote("Lightning Bolt", "BOLT-ID").to_card_record()

        assert record.oracle_id == "bolt-id"
        assert record.colors == ("R",)

    def test_card_record_requires_oracle_id(self) -> None:
        """A record without an oracle id cannot be stored."""
        card = make_remote("Token", "")

        with pytest.raises(MalformedRecordError, match="no oracle_id"):
            card.to_card_record()

    def test_printing_record_requires_release_date(self) -> None:
        """A printing without a release date cannot be ordered, so it is rejected."""
        card = make_remote("Shock", "shock", released_at=None)

        with pytest.raises(MalformedRecordError, match="no release date"):
            card.to_printing_record()

    def test_printing_record_fields(self) -> None:
        """Printing fields come from the printing-level keys."""
        printing = make_remote(
            "Shock", "shock", "p9", "m19", "2018-07-13", collector_number="156", arena_id=68000
        ).to_printing_record()

        assert printing.printing_id == "p9"
        assert printing.set_code == "m19"
        assert printing.released_at == "2018-07-13"
        assert printing.collector_number == "156"
        assert printing.arena_id == 68000


class TestDisplayImage:
    def test_prefers_normal(self) -> None:
        """Normal beats small and large."""
        card = make_remote(
            "Shock",
            "shock",
            image_uris={"large": "L", "small": "S", "normal": "N"},
        )

        assert card.display_image_uri() == "N"

    def test_falls_back_to_small_then_large(self) -> None:
        """Small beats large when normal is missing."""
        both = make_remote("A", "a", image_uris={"large": "L", "small": "S"})
        assert both.display_image_uri() == "S"
        assert make_remote("A", "a", image_uris={"large": "L"}).display_image_uri() == "L"

    def test_uses_card_faces(self) -> None:
        """Double-faced cards carry images on their faces."""
        card = make_remote(
            "Delver of Secrets // Insectile Aberration",
            "delver",
            image_uris=None,
            card_faces=[
                {"name": "Delver of Secrets", "image_uris": {"normal": "FRONT"}},
                {"name": "Insectile Aberration", "image_uris": {"normal": "BACK"}},
            ],
        )

        assert card.display_image_uri() == "FRONT"
        assert card.to_printing_record().image_uri == "FRONT"

    def test_no_images(self) -> None:
        """Missing images are allowed."""
        assert make_remote("A", "a", image_uris=None).display_image_uri() is None


class TestRemoteList:
    def test_keeps_raw_objects(self) -> None:
        """Card objects stay raw until validated one by one."""
        page = RemoteList.model_validate(
            {
                "object": "list",
                "has_more": True,
                "next_page": "https://api.scryfall.com/cards/search?page=2",
                "data": [{"name": "Shock"}, {"bogus": 1}],
            }
        )

        assert page.has_more
        assert len(page.data) == 2
