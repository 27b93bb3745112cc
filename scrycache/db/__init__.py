from scrycache.db.database import create_engine, create_session_factory, init_db
from scrycache.db.store import CardStore

__all__ = [
    "CardStore",
    "create_engine",
    "create_session_factory",
    "init_db",
]
