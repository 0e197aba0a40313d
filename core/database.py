"""
core/database.py -- Engine construction shared by every store.

Each repository (auth/store.py, activity/store.py) owns its own tables and
MetaData but builds its engine here so SQLite connections get the same
threading and journal settings everywhere.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an engine; SQLite URLs get check_same_thread=False and WAL mode.

    check_same_thread=False is required because FastAPI runs sync handlers in
    a thread pool, so one pooled connection is used from several threads.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
