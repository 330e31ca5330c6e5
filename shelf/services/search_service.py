"""Read-only album and photo lookups."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, col, func, or_, select

from shelf.errors import NotFound
from shelf.models.album import Album, AlbumType, PhotoAlbum
from shelf.models.photo import File, Photo
from shelf.utils.sanitize import id_string

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """One file of an album member photo, as needed for downloads."""

    photo_uid: str
    photo_title: str
    taken_at: datetime | None
    file_uid: str
    root: str
    name: str
    hash: str
    sidecar: bool
    primary: bool


def album_by_uid(session: Session, uid: str, include_deleted: bool = False) -> Album:
    """Find an album by UID. Soft-deleted albums are hidden unless include_deleted."""
    uid = id_string(uid)
    album = session.get(Album, uid) if uid else None
    if album is None or (album.is_deleted() and not include_deleted):
        raise NotFound()
    return album


def list_albums(
    session: Session,
    q: str | None = None,
    album_type: AlbumType | None = None,
    favorite: bool | None = None,
    count: int = 100,
    offset: int = 0,
) -> list[Album]:
    """Albums that are not deleted, favorites first, then by title."""
    stmt = select(Album).where(col(Album.deleted_at).is_(None))
    if q:
        like = f"%{q.strip()}%"
        stmt = stmt.where(or_(col(Album.title).ilike(like), col(Album.slug).ilike(like)))
    if album_type is not None:
        stmt = stmt.where(Album.type == album_type)
    if favorite is not None:
        stmt = stmt.where(Album.favorite == favorite)
    stmt = stmt.order_by(col(Album.favorite).desc(), Album.title, Album.uid).offset(offset).limit(count)
    return list(session.exec(stmt).all())


def album_counts(session: Session) -> dict[str, int]:
    """Album totals published to clients after changes."""
    base = select(func.count()).select_from(Album).where(col(Album.deleted_at).is_(None))
    return {
        "albums": session.exec(base).one(),
        "favorites": session.exec(base.where(Album.favorite == True)).one(),  # noqa: E712
    }


def album_photo_uids(session: Session, album_uid: str, limit: int) -> list[str]:
    """UIDs of non-deleted photos in an album, oldest first."""
    stmt = (
        select(Photo.uid)
        .join(PhotoAlbum, col(PhotoAlbum.photo_uid) == col(Photo.uid))
        .where(PhotoAlbum.album_uid == album_uid, col(Photo.deleted_at).is_(None))
        .order_by(col(Photo.taken_at).asc(), Photo.uid)
        .limit(limit)
    )
    return list(session.exec(stmt).all())


def album_files(session: Session, album_uid: str, limit: int) -> list[FileResult]:
    """Files of album member photos, primary file first within each photo."""
    stmt = (
        select(File, Photo)
        .join(Photo, col(Photo.uid) == col(File.photo_uid))
        .join(PhotoAlbum, col(PhotoAlbum.photo_uid) == col(Photo.uid))
        .where(PhotoAlbum.album_uid == album_uid, col(Photo.deleted_at).is_(None))
        .order_by(col(Photo.taken_at).asc(), Photo.uid, col(File.primary).desc(), File.name)
        .limit(limit)
    )
    return [
        FileResult(
            photo_uid=photo.uid,
            photo_title=photo.title,
            taken_at=photo.taken_at,
            file_uid=f.uid,
            root=f.root,
            name=f.name,
            hash=f.hash,
            sidecar=f.sidecar,
            primary=f.primary,
        )
        for f, photo in session.exec(stmt).all()
    ]


def photo_selection(session: Session, photos: list[str], albums: list[str]) -> list[str]:
    """Resolve a selection to existing photo UIDs, keeping the caller's order.

    Unknown or deleted photos are dropped silently.
    """
    wanted = [id_string(uid) for uid in photos if id_string(uid)]
    found: set[str] = set()
    if wanted:
        found = set(session.exec(
            select(Photo.uid).where(col(Photo.uid).in_(wanted), col(Photo.deleted_at).is_(None))
        ).all())

    result: list[str] = []
    seen: set[str] = set()
    for uid in wanted:
        if uid in found and uid not in seen:
            result.append(uid)
            seen.add(uid)

    for album_uid in albums:
        for uid in album_photo_uids(session, id_string(album_uid), limit=10000):
            if uid not in seen:
                result.append(uid)
                seen.add(uid)

    return result
