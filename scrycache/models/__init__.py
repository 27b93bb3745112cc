from scrycache.models.card import (
    Card,
    CardRecord,
    InsertionResult,
    PrintingRecord,
    QueryCacheEntry,
    QueryCacheStats,
    normalize_oracle_id,
)
from scrycache.models.decklist import DeckEntry, Decklist
from scrycache.models.remote import RemoteCard, RemoteCardFace, RemoteList

__all__ = [
    "Card",
    "CardRecord",
    "DeckEntry",
    "Decklist",
    "InsertionResult",
    "PrintingRecord",
    "QueryCacheEntry",
    "QueryCacheStats",
    "RemoteCard",
    "RemoteCardFace",
    "RemoteList",
    "normalize_oracle_id",
]
