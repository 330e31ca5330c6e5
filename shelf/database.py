"""SQLite engine for the album index."""

from sqlalchemy import Index, event
from sqlmodel import SQLModel, Session, create_engine

from shelf.config import settings

# Import all models so SQLModel registers them
import shelf.models  # noqa: F401
from shelf.models.album import PhotoAlbum

# Milliseconds a writer waits for a lock before SQLite gives up
BUSY_TIMEOUT = 5000

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False},
)

# Reverse lookup: which albums contain a photo
Index("idx_photos_albums_photo", PhotoAlbum.photo_uid)


@event.listens_for(engine, "connect")
def _configure_connection(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT}")
    cursor.close()


def init_db() -> None:
    """Create the album and photo tables if they don't exist yet."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: one session per request."""
    with Session(engine) as session:
        yield session
