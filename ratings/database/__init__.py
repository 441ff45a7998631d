from .db import engine, get_session, open_session, wait_for_db, StorageUnavailable

__all__ = ["engine", "get_session", "open_session", "wait_for_db", "StorageUnavailable"]
