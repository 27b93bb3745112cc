from collections.abc import AsyncIterator

import pytest

from scrycache.db.store import CardStore
from scrycache.services.card_resolver import CardResolver
from scrycache.services.default_resolver import reset_default_resolver
from tests.stubs import (
    BOLT_ID,
    COUNTERSPELL_ID,
    ISLAND_ID,
    MOUNTAIN_ID,
    PYROBLAST_ID,
    RATS_ID,
    SHOCK_ID,
    StubSearchClient,
    make_remote,
)


@pytest.fixture(autouse=True)
async def clear_default_resolver() -> AsyncIterator[None]:
    """Close the process-wide resolver between tests."""
    yield
    await reset_default_resolver()


@pytest.fixture
async def store() -> AsyncIterator[CardStore]:
    """Provide an isolated in-memory card store."""
    card_store = await CardStore.in_memory()
    yield card_store
    await card_store.aclose()


@pytest.fixture
def client() -> StubSearchClient:
    """Stub remote client preloaded with a small card pool."""
    stub = StubSearchClient()

    bolt_m11 = make_remote("Lightning Bolt", BOLT_ID, "bolt-m11", "m11", "2010-07-16")
    bolt_lea = make_remote("Lightning Bolt", BOLT_ID, "bolt-lea", "lea", "1993-08-05")
    bolt_2ed = make_remote("Lightning Bolt", BOLT_ID, "bolt-2ed", "2ed", "1993-12-01")
    stub.add_card(bolt_m11, [bolt_lea, bolt_2ed])

    shock = make_remote("Shock", SHOCK_ID, "shock-m19", "m19", "2018-07-13", mana_cost="{R}")
    stub.add_card(shock)

    basic = {"type_line": "Basic Land — Mountain", "mana_cost": "", "cmc": 0.0, "colors": []}
    mountain = make_remote("Mountain", MOUNTAIN_ID, "mountain-neo", "neo", "2022-02-18", **basic)
    stub.add_card(mountain)
    basic["type_line"] = "Basic Land — Island"
    stub.add_card(make_remote("Island", ISLAND_ID, "island-neo", "neo", "2022-02-18", **basic))

    stub.add_card(make_remote("Pyroblast", PYROBLAST_ID, "pyroblast-ice", "ice", "1995-06-03"))
    stub.add_card(
        make_remote(
            "Counterspell", COUNTERSPELL_ID, "counterspell-lea", "lea", "1993-08-05", colors=["U"]
        )
    )
    stub.add_card(
        make_remote(
            "Relentless Rats",
            RATS_ID,
            "rats-m11",
            "m11",
            "2010-07-16",
            type_line="Creature — Rat",
            colors=["B"],
        )
    )

    # Two results for one oracle id, one result without an oracle id
    stub.queries["t:instant cmc=1"] = [
        bolt_m11,
        shock,
        bolt_lea,
        make_remote("Token Thing", "", "token-1"),
    ]
    stub.queries["t:nothing"] = []
    return stub


@pytest.fixture
def resolver(store: CardStore, client: StubSearchClient) -> CardResolver:
    """Resolver bound to an isolated store and the stub client."""
    return CardResolver(store, client)
