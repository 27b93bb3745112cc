"""
Remote card records as returned by the Scryfall API.

Only the fields the cache consumes are modelled. Every field has a default
so that one odd object does not invalidate a whole page; records missing
data required for storage are rejected at conversion time instead.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from scrycache.errors import MalformedRecordError
from scrycache.models.card import CardRecord, PrintingRecord, normalize_oracle_id

# Display image preference, best first
IMAGE_PRIORITY: tuple[str, ...] = ("normal", "small", "large")


class RemoteCardFace(BaseModel):
    """One face of a multi-faced card."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    image_uris: dict[str, str] | None = None


class RemoteCard(BaseModel):
    """A Scryfall card object (one printing of one card)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    oracle_id: str | None = None
    name: str = ""
    type_line: str = ""
    layout: str = "normal"
    cmc: float = 0.0
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    mana_cost: str | None = None
    oracle_text: str | None = None
    power: str | None = None
    toughness: str | None = None
    keywords: list[str] = Field(default_factory=list)
    legalities: dict[str, str] = Field(default_factory=dict)
    prints_search_uri: str | None = None

    # Printing-level fields
    set_code: str | None = Field(default=None, alias="set")
    set_name: str = ""
    rarity: str = ""
    image_uris: dict[str, str] | None = None
    card_faces: list[RemoteCardFace] | None = None
    games: list[str] = Field(default_factory=list)
    released_at: str | None = None
    scryfall_uri: str = ""
    collector_number: str | None = None
    lang: str | None = None
    arena_id: int | None = None

    def display_image_uri(self) -> str | None:
        """
        Pick the display image for this printing.

        Prefers normal, then small, then large. Multi-faced layouts carry
        images on their faces; the first face with images is used.
        """
        sources: list[dict[str, str]] = []
        if self.image_uris:
            sources.append(self.image_uris)
        for face in self.card_faces or []:
            if face.image_uris:
                sources.append(face.image_uris)

        for uris in sources:
            for size in IMAGE_PRIORITY:
                if uris.get(size):
                    return uris[size]
        return None

    def to_card_record(self) -> CardRecord:
        """
        Convert to oracle-level card data.

        Raises:
            MalformedRecordError: If oracle_id or name is missing
        """
        if not self.oracle_id:
            raise MalformedRecordError(self.name or "<unnamed>", "no oracle_id")
        if not self.name:
            raise MalformedRecordError(self.oracle_id, "no name")

        return CardRecord(
            oracle_id=normalize_oracle_id(self.oracle_id),
            name=self.name,
            type_line=self.type_line,
            layout=self.layout,
            cmc=self.cmc,
            colors=tuple(self.colors),
            color_identity=tuple(self.color_identity),
            mana_cost=self.mana_cost,
            oracle_text=self.oracle_text,
            power=self.power,
            toughness=self.toughness,
            keywords=tuple(self.keywords),
            legalities=dict(self.legalities),
            prints_search_uri=self.prints_search_uri,
        )

    def to_printing_record(self) -> PrintingRecord:
        """
        Convert to printing-level data.

        Raises:
            MalformedRecordError: If oracle_id, id, set or released_at is missing
        """
        label = self.name or "<unnamed>"
        if not self.oracle_id:
            raise MalformedRecordError(label, "no oracle_id")
        if not self.id:
            raise MalformedRecordError(label, "no printing id")
        if not self.set_code:
            raise MalformedRecordError(label, "no set code")
        if not self.released_at:
            raise MalformedRecordError(label, "no release date")

        return PrintingRecord(
            printing_id=self.id,
            oracle_id=normalize_oracle_id(self.oracle_id),
            set_code=self.set_code,
            set_name=self.set_name,
            rarity=self.rarity,
            scryfall_uri=self.scryfall_uri,
            released_at=self.released_at,
            games=tuple(self.games),
            image_uri=self.display_image_uri(),
            collector_number=self.collector_number,
            lang=self.lang,
            arena_id=self.arena_id,
        )


class RemoteList(BaseModel):
    """
    One page of a paginated Scryfall list.

    Card objects are kept raw here so the client can validate them one at a
    time and skip the ones that fail.
    """

    model_config = ConfigDict(extra="ignore")

    object: str = "list"
    data: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    next_page: str | None = None
    total_cards: int | None = None
    warnings: list[str] | None = None
