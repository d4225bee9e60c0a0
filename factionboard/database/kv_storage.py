"""
Key-value storage on top of the storage_entries table.

Each key holds one complete serialized collection. Writes replace the
whole value (last writer wins); there is no optimistic concurrency control
between processes sharing the same database.
"""

from datetime import datetime, UTC
from typing import Optional
from sqlalchemy.engine import Engine
from sqlmodel import Session, select
from loguru import logger

from factionboard.models.storage_entry import StorageEntry


class KeyValueStorage:
    """Persistent string key-value storage."""

    def __init__(self, engine: Optional[Engine] = None):
        """
        Args:
            engine: SQLModel engine; defaults to the application engine
        """
        if engine is None:
            from factionboard.database.connection import engine as default_engine
            engine = default_engine
        self.engine = engine

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is missing."""
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str):
        """Create or replace the value stored under key."""
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            if entry:
                entry.value = value
                entry.updated_at = datetime.now(UTC)
            else:
                entry = StorageEntry(key=key, value=value)
            session.add(entry)
            session.commit()

    def remove_item(self, key: str):
        """Delete the key; missing keys are ignored."""
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            if entry:
                session.delete(entry)
                session.commit()
                logger.debug(f"Removed storage key: {key}")

    def keys(self) -> list[str]:
        with Session(self.engine) as session:
            return list(session.exec(select(StorageEntry.key)).all())
