"""Database models and the persistent store behind the remote fetch cache."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from sqlalchemy import JSON, Column, String, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for all database models."""


class CacheEntry(Base):
    """A stored remote response, keyed by the hash of the request that produced it."""

    __tablename__ = "cache_entries"

    key = Column(String, primary_key=True)
    label = Column(String, nullable=False)
    data = Column(JSON, nullable=True)

    def __repr__(self) -> str:
        """Return the representation of the entry."""
        return f"{self.__class__.__name__}(label={self.label!r}, key={self.key!r})"


class CacheStore:
    """SQLite-backed store of `CacheEntry` rows."""

    def __init__(self, db: str | Path = ":memory:") -> None:
        """Initialize the store; `db` is a path, an `sqlite:///` URL, or `:memory:`."""
        if str(db) in (":memory:", "sqlite:///:memory:"):
            db = "sqlite:///:memory:"
        elif isinstance(db, str):
            db = Path(db.removeprefix("sqlite:///"))
        if isinstance(db, Path):
            db.parent.mkdir(parents=True, exist_ok=True)
            db = f"sqlite:///{db.absolute()!s}"
        self.db: str = db
        self._engine: Any = None
        self._sessionmaker: Any = None
        self._entries: int = 0
        # SQLite connections are shared between resolver threads.
        self._lock = threading.Lock()

    def open(self) -> None:
        """Open the database connection."""
        if self.db == "sqlite:///:memory:":
            self._engine = create_engine(
                self.db,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self._engine = create_engine(self.db, connect_args={"check_same_thread": False})
        Base.metadata.create_all(self._engine)
        self._sessionmaker = sessionmaker(bind=self._engine, expire_on_commit=False)

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def __enter__(self) -> CacheStore:
        """Enter context manager."""
        if self._entries == 0:
            self.open()
        self._entries += 1
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Exit context manager."""
        self._entries -= 1
        if self._entries == 0:
            self.close()

    @property
    def is_open(self) -> bool:
        """Check whether the database connection is open."""
        return self._sessionmaker is not None

    def _session(self) -> Any:  # noqa: ANN401
        if self._sessionmaker is None:
            msg = f"{self!r} is not open"
            raise RuntimeError(msg)
        return self._sessionmaker()

    def get(self, key: str) -> CacheEntry | None:
        """Get the entry stored under `key`, if any."""
        with self._lock, self._session() as session:
            return session.get(CacheEntry, key)  # type: ignore[no-any-return]

    def put(self, entry: CacheEntry) -> None:
        """Store an entry, replacing any entry already stored under the same key."""
        with self._lock, self._session() as session:
            session.merge(entry)
            session.commit()

    def __len__(self) -> int:
        """Return the number of stored entries."""
        with self._lock, self._session() as session:
            return session.query(CacheEntry).count()  # type: ignore[no-any-return]

    def __contains__(self, key: str) -> bool:
        """Check if an entry is stored under `key`."""
        return self.get(key) is not None

    def __repr__(self) -> str:
        """Return the representation of the store."""
        return f"{self.__class__.__name__}({self.db!r})"
