import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from property_api.config import settings
from property_api.core.exceptions import ConflictException
from property_api.models.base import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Persistence gateway owning the SQLAlchemy engine and session factory.

    Created once per process (see ``create_app``), connected in the app
    lifespan and disposed at shutdown. Repositories never touch the engine
    directly; they receive a ``Session`` handed out by ``session()``.

    Usage:
        database = Database(settings.DATABASE_URL)
        database.connect()
        with database.session() as db:
            ...
        database.dispose()
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine_options = engine_options
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> None:
        """Create the engine and session factory (idempotent)"""
        if self._engine is not None:
            return

        options: dict[str, Any] = {
            "pool_pre_ping": True,  # Verify connections before using
            "echo": settings.DEBUG,  # Log SQL queries in debug mode
        }
        if self.is_sqlite:
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["pool_size"] = settings.DB_POOL_SIZE
            options["max_overflow"] = settings.DB_MAX_OVERFLOW
        options.update(self.engine_options)

        self._engine = create_engine(self.url, **options)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("Connected to database %s", self._engine.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        """Release pooled connections"""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connections released")

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        """Open a new session; caller is responsible for closing it"""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a multi-statement write as one database transaction.

    Commits when the block exits normally and rolls back on any exception,
    so lease and unit rows are never left half-updated. Unique-constraint
    violations are surfaced as ConflictException.

    Usage:
        with atomic(db):
            lease_repo.create_no_commit(lease)
            unit.status = UnitStatus.OCCUPIED
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error rolled back: %s", e.orig)
        raise ConflictException("Record conflicts with existing data") from e
    except Exception:
        db.rollback()
        raise


def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency for database sessions.

    Yields a session from the application's Database gateway and ensures
    it's closed after use, on success and failure alike.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
