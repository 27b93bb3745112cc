"""Remote card search clients."""

from scrycache.client.base import RemoteSearchClient
from scrycache.client.scryfall import ScryfallClient

__all__ = ["RemoteSearchClient", "ScryfallClient"]
