"""
Scryfall API client.

Fetches card objects from the Scryfall search endpoint, following
pagination. Respects Scryfall rate limits with a fixed delay between
requests (10 requests/second by default).
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from scrycache.config import Settings
from scrycache.errors import MalformedRecordError, RemoteUnavailableError
from scrycache.models.remote import RemoteCard, RemoteList

logger = logging.getLogger(__name__)

SCRYFALL_API = "https://api.scryfall.com"
SEARCH_PATH = "/cards/search"


class ScryfallClient:
    """
    Async Scryfall search client.

    A search with no matches is answered by Scryfall with HTTP 404; that is
    treated as an empty result. Every other HTTP or transport failure raises
    RemoteUnavailableError annotated with the query.
    """

    def __init__(
        self,
        base_url: str = SCRYFALL_API,
        *,
        user_agent: str = "scrycache/1.0",
        accept: str = "application/json",
        timeout: float = 30.0,
        rate_limit_delay: float = 0.1,
        proxy: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: API root, without trailing slash
            rate_limit_delay: Minimum seconds between consecutive requests
            http_client: Pre-built client to use instead of creating one.
                         It is not closed by aclose().
        """
        self._rate_limit_delay = rate_limit_delay
        self._last_request: float | None = None
        self._throttle_lock = asyncio.Lock()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent, "Accept": accept},
            timeout=timeout,
            proxy=proxy,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScryfallClient":
        """Build a client from application settings."""
        return cls(
            settings.scryfall_api_url,
            user_agent=settings.user_agent,
            accept=settings.accept,
            timeout=settings.request_timeout,
            rate_limit_delay=settings.rate_limit_delay,
            proxy=settings.proxy_url,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Searches ---

    async def search_by_query(self, text: str) -> AsyncIterator[RemoteCard]:
        async for card in self._paginate(SEARCH_PATH, {"q": text}, text):
            yield card

    async def search_by_exact_name(self, name: str) -> list[RemoteCard]:
        escaped = name.replace('"', '\\"')
        params = {"q": f'!"{escaped}"'}
        return [card async for card in self._paginate(SEARCH_PATH, params, name)]

    async def search_by_identifier(self, oracle_id: str) -> list[RemoteCard]:
        params = {"q": f"oracleid:{oracle_id}"}
        return [card async for card in self._paginate(SEARCH_PATH, params, oracle_id)]

    async def fetch_all_printings(self, card: RemoteCard) -> AsyncIterator[RemoteCard]:
        """
        Yield every printing of a card.

        Uses the card's prints_search_uri when present, otherwise searches
        by oracle id with unique:prints.

        Raises:
            MalformedRecordError: If the card has neither a prints URI nor an oracle id
        """
        key = card.oracle_id or card.name
        if card.prints_search_uri:
            pages = self._paginate(card.prints_search_uri, None, key)
        elif card.oracle_id:
            params = {"q": f"oracleid:{card.oracle_id} unique:prints"}
            pages = self._paginate(SEARCH_PATH, params, key)
        else:
            raise MalformedRecordError(key or "<unnamed>", "no prints_search_uri or oracle_id")

        async for printing in pages:
            yield printing

    # --- Transport ---

    async def _throttle(self) -> None:
        if self._rate_limit_delay <= 0:
            return
        loop = asyncio.get_running_loop()
        # Held across the sleep so concurrent callers queue up one delay apart
        async with self._throttle_lock:
            if self._last_request is not None:
                wait = self._last_request + self._rate_limit_delay - loop.time()
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request = loop.time()

    async def _fetch_page(self, url: str, params: dict[str, Any] | None, key: str) -> RemoteList:
        await self._throttle()

        try:
            response = await self._http.get(url, params=params)
        except httpx.RequestError as e:
            raise RemoteUnavailableError(key, str(e) or type(e).__name__) from e

        if response.status_code == 404:
            logger.debug("No matches for %r", key)
            return RemoteList()

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteUnavailableError(
                key, f"HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e

        try:
            return RemoteList.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedRecordError(key, f"unparseable result page: {e}") from e

    async def _paginate(
        self, url: str, params: dict[str, Any] | None, key: str
    ) -> AsyncIterator[RemoteCard]:
        page_url = url
        page_params = params
        total = 0

        while True:
            page = await self._fetch_page(page_url, page_params, key)

            for raw in page.data:
                try:
                    card = RemoteCard.model_validate(raw)
                except ValidationError as e:
                    logger.warning("Skipping malformed card object for %r: %s", key, e)
                    continue
                total += 1
                yield card

            if not page.has_more or not page.next_page:
                break
            # Next page URL includes params
            page_url = page.next_page
            page_params = None

        logger.info("Fetched %d card objects for %r", total, key)
