"""
scrycache: a local cache in front of the Scryfall card search API.

Resolve queries, names and oracle ids into Cards that carry their full
printing history, and parse and validate Arena decklists.
"""

from scrycache.errors import (
    AmbiguousCardError,
    CacheInconsistentError,
    CardCacheError,
    DecklistParseError,
    DeckValidationError,
    FailureKind,
    MalformedRecordError,
    NotCachedError,
    NotFoundError,
    RemoteUnavailableError,
    SideboardLimitError,
    StoreError,
    ValidationRule,
)
from scrycache.models.card import Card, CardRecord, InsertionResult, PrintingRecord
from scrycache.models.decklist import DeckEntry, Decklist
from scrycache.services.card_resolver import CardResolver
from scrycache.services.default_resolver import (
    configure,
    get_default_resolver,
    parse_decklist,
    query,
    query_card,
    query_card_by_oracle_id,
    reset_default_resolver,
)

__all__ = [
    "AmbiguousCardError",
    "CacheInconsistentError",
    "Card",
    "CardCacheError",
    "CardRecord",
    "CardResolver",
    "DeckEntry",
    "DeckValidationError",
    "Decklist",
    "DecklistParseError",
    "FailureKind",
    "InsertionResult",
    "MalformedRecordError",
    "NotCachedError",
    "NotFoundError",
    "PrintingRecord",
    "RemoteUnavailableError",
    "SideboardLimitError",
    "StoreError",
    "ValidationRule",
    "configure",
    "get_default_resolver",
    "parse_decklist",
    "query",
    "query_card",
    "query_card_by_oracle_id",
    "reset_default_resolver",
]
