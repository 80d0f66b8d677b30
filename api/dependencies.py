from fastapi import Request
from database.db_manager import DatabaseManager
from entry.sessions import EntrySessionStore


def get_db(request: Request) -> DatabaseManager:
    """FastAPI dependency that provides the DatabaseManager."""
    return request.app.state.db_manager


def get_entry_sessions(request: Request) -> EntrySessionStore:
    """Open round-entry workflows for this process."""
    return request.app.state.entry_sessions
