"""
Remote search client interface.

The resolver talks to the remote card source only through this protocol,
so tests and alternative sources can stand in for the Scryfall client.
"""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from scrycache.models.remote import RemoteCard


@runtime_checkable
class RemoteSearchClient(Protocol):
    """Async access to a Scryfall-style card search API."""

    def search_by_query(self, text: str) -> AsyncIterator[RemoteCard]:
        """
        Lazily yield every card matching a search query.

        Follows pagination until exhausted. Each call starts over from the
        first page. A query with no matches yields nothing.
        """
        ...

    async def search_by_exact_name(self, name: str) -> list[RemoteCard]:
        """Cards whose name is exactly `name` (quoted `!"name"` search)."""
        ...

    async def search_by_identifier(self, oracle_id: str) -> list[RemoteCard]:
        """Cards with the given oracle id."""
        ...

    def fetch_all_printings(self, card: RemoteCard) -> AsyncIterator[RemoteCard]:
        """Lazily yield every printing of the card's oracle identity."""
        ...
