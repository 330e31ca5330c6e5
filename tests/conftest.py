"""Shared fixtures for the Shelf test suite."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Setup environment for testing
_root = tempfile.mkdtemp()
os.environ["SHELF_STORAGE_DIR"] = os.path.join(_root, "storage")
os.environ["SHELF_ORIGINALS_DIR"] = os.path.join(_root, "originals")
os.environ["SHELF_SIDECAR_DIR"] = os.path.join(_root, "storage", "sidecar")
os.environ["SHELF_CACHE_DIR"] = os.path.join(_root, "storage", "cache")
os.environ["SHELF_ALBUMS_DIR"] = os.path.join(_root, "storage", "albums")
os.environ["SHELF_DB_PATH"] = os.path.join(_root, "storage", "test.db")
os.environ["SHELF_DOWNLOAD_TOKEN"] = "dl-test-token"

import secrets  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from shelf.api.deps import get_notifier  # noqa: E402
from shelf.config import settings  # noqa: E402
from shelf.database import engine  # noqa: E402
from shelf.main import app  # noqa: E402
from shelf.models.album import Album, AlbumType, PhotoAlbum  # noqa: E402
from shelf.models.photo import File, Photo  # noqa: E402
from shelf.utils.security import create_access_token  # noqa: E402


class RecordingNotifier:
    """Notifier that remembers everything instead of publishing it."""

    def __init__(self):
        self.events: list[tuple] = []
        self.toasts: list[str] = []
        self.configs: list[dict] = []

    def publish(self, kind, uid, context, entity=None):
        self.events.append((kind.value, uid, context.user_id if context else ""))

    def success(self, message):
        self.toasts.append(message)

    def client_config(self, data):
        self.configs.append(data)

    def kinds(self, uid: str) -> list[str]:
        return [kind for kind, event_uid, _ in self.events if event_uid == uid]


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def recorder():
    notifier = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield notifier
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def session(client):
    with Session(engine) as s:
        yield s


def _headers(role: str) -> dict:
    token = create_access_token(f"usr_{role}", role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin():
    return _headers("admin")


@pytest.fixture
def member():
    return _headers("member")


@pytest.fixture
def guest():
    return _headers("guest")


@pytest.fixture
def unique():
    """Returns a title suffix so tests sharing the database don't collide."""
    return lambda prefix="Album": f"{prefix} {secrets.token_hex(3)}"


@pytest.fixture
def make_album(session):
    def factory(title: str, album_type: AlbumType = AlbumType.DEFAULT, photos: list[str] = ()) -> Album:
        album = Album.new(title, album_type)
        session.add(album)
        session.commit()
        for uid in photos:
            session.add(PhotoAlbum(album_uid=album.uid, photo_uid=uid))
        session.commit()
        session.refresh(album)
        return album

    return factory


_clock = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_photo(session):
    """Create a photo with one file; writes content to disk unless None."""

    def factory(
        name: str,
        content: bytes | None = b"jpeg-bytes",
        file_hash: str | None = None,
        sidecar: bool = False,
        title: str = "",
        taken_at: datetime | None = None,
    ) -> Photo:
        global _clock
        if taken_at is None:
            _clock += timedelta(minutes=1)
            taken_at = _clock

        photo = Photo(title=title, taken_at=taken_at)
        session.add(photo)
        session.commit()
        session.refresh(photo)

        f = File(
            photo_uid=photo.uid,
            name=name,
            hash=secrets.token_hex(20) if file_hash is None else file_hash,
            sidecar=sidecar,
            primary=not sidecar,
        )
        session.add(f)
        session.commit()

        if content is not None:
            path = settings.originals_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        return photo

    return factory
