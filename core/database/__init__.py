"""
Database module for the transport order dashboard
"""
from .connection import (
    create_db_engine,
    create_session_factory,
    session_scope,
    create_tables,
    drop_tables,
    check_connection,
)

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "check_connection",
]
