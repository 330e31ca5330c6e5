"""Album lifecycle and membership business logic.

Every mutation commits first and then runs its side effects (client config
refresh, change event, success toast, YAML backup). Side effects are
best-effort: they log their own failures and never undo or fail the request.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from shelf import i18n
from shelf.config import settings
from shelf.errors import Conflict, NotFound, StorageError, ValidationError
from shelf.models.album import Album, AlbumType, PhotoAlbum
from shelf.models.photo import Photo
from shelf.services import search_service
from shelf.services.backup_service import save_album_as_yaml
from shelf.services.cover_cache import CoverCache
from shelf.services.events import ActorContext, EntityEvent, Notifier
from shelf.services.export_service import file_name
from shelf.utils.sanitize import log as log_safe
from shelf.utils.sanitize import slugify

logger = logging.getLogger(__name__)

# Fields a client may change through update_album
EDITABLE_FIELDS = ("title", "description", "notes", "category", "location", "sort_order", "favorite")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _commit(session: Session, action: str, key: str = "err_save_failed") -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("album: %s (%s)", e, action)
        raise StorageError(key=key) from e


def _after_change(
    session: Session,
    album: Album,
    kind: EntityEvent,
    context: ActorContext | None,
    notifier: Notifier,
    toast: str | None = None,
    client_config: bool = True,
) -> None:
    """Run the post-commit side effects of an album mutation."""
    if toast:
        notifier.success(toast)
    if client_config:
        try:
            notifier.client_config(search_service.album_counts(session))
        except SQLAlchemyError as e:
            logger.warning("album: %s (client config)", e)
    notifier.publish(kind, album.uid, context, entity=album_record(album))
    save_album_as_yaml(album, session)


def album_record(album: Album) -> dict:
    """JSON-ready album fields as returned by the API."""
    return {
        "uid": album.uid,
        "slug": album.slug,
        "type": album.type.value,
        "title": album.title,
        "description": album.description,
        "notes": album.notes,
        "category": album.category,
        "location": album.location,
        "order": album.sort_order.value,
        "favorite": album.favorite,
        "created_at": album.created_at.isoformat() if album.created_at else None,
        "updated_at": album.updated_at.isoformat() if album.updated_at else None,
        "deleted_at": album.deleted_at.isoformat() if album.deleted_at else None,
    }


# --- Lifecycle ---

def create_album(
    session: Session,
    title: str,
    favorite: bool,
    context: ActorContext | None,
    notifier: Notifier,
    album_type: AlbumType = AlbumType.DEFAULT,
) -> Album:
    """Create a new album. Default albums must have a unique title."""
    album = Album.new(title, album_type)
    if not album.title:
        raise ValidationError()
    album.favorite = favorite

    if album.is_default():
        _check_unique_title(session, album.title)

    session.add(album)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise Conflict(log_safe(album.title)) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("album: %s (create)", e)
        raise StorageError() from e
    session.refresh(album)

    logger.info("album: created %s", log_safe(album.title))
    _after_change(session, album, EntityEvent.CREATED, context, notifier,
                  toast=i18n.msg("msg_album_created"))
    return album


def _title_key(title: str) -> str:
    return " ".join(title.casefold().split())


def _check_unique_title(session: Session, title: str, exclude_uid: str | None = None) -> None:
    """Raise Conflict if another active default album has the same title.

    Titles are compared by slug. Titles without any ASCII letters or digits
    have an empty slug and are compared case-insensitively instead.
    """
    slug = slugify(title)
    stmt = select(Album).where(
        Album.slug == slug,
        Album.type == AlbumType.DEFAULT,
        col(Album.deleted_at).is_(None),
    )
    if exclude_uid:
        stmt = stmt.where(Album.uid != exclude_uid)

    with session.no_autoflush:
        candidates = session.exec(stmt).all()
    if not slug:
        key = _title_key(title)
        candidates = [a for a in candidates if _title_key(a.title) == key]
    if candidates:
        raise Conflict(log_safe(title))


def get_album(session: Session, uid: str) -> Album:
    return search_service.album_by_uid(session, uid)


def update_album(
    session: Session,
    uid: str,
    patch: dict,
    context: ActorContext | None,
    notifier: Notifier,
) -> Album:
    """Apply a partial update; only keys present in patch are changed."""
    album = search_service.album_by_uid(session, uid)

    changes = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValidationError()
        if album.is_default():
            _check_unique_title(session, title, exclude_uid=album.uid)
        changes["title"] = title
        album.slug = slugify(title)
    for field in ("favorite", "sort_order"):
        if field in changes and changes[field] is None:
            raise ValidationError()

    for field, value in changes.items():
        setattr(album, field, value if value is not None else "")
    album.updated_at = _now()

    session.add(album)
    _commit(session, "update")
    session.refresh(album)

    _after_change(session, album, EntityEvent.UPDATED, context, notifier,
                  toast=i18n.msg("msg_album_saved"))
    return album


def _soft_delete(session: Session, album: Album) -> Album:
    album.deleted_at = _now()
    session.add(album)
    _commit(session, "delete", key="err_delete_failed")
    session.refresh(album)
    return album


def _delete_permanently(session: Session, album: Album) -> Album:
    snapshot = Album(**album.model_dump())
    snapshot.deleted_at = _now()
    try:
        session.execute(delete(PhotoAlbum).where(PhotoAlbum.album_uid == album.uid))
        session.delete(album)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("album: %s (delete)", e)
        raise StorageError(key="err_delete_failed") from e
    return snapshot


# Manually created albums are kept as recoverable tombstones, generated
# albums are removed with all their links since indexing recreates them.
DELETE_STRATEGIES: dict[AlbumType, Callable[[Session, Album], Album]] = {
    AlbumType.DEFAULT: _soft_delete,
    AlbumType.AUTO: _delete_permanently,
}


def delete_album(
    session: Session,
    uid: str,
    context: ActorContext | None,
    notifier: Notifier,
) -> Album:
    """Delete an album using the strategy for its type. Returns the deleted album."""
    album = search_service.album_by_uid(session, uid)
    deleted = DELETE_STRATEGIES[album.type](session, album)

    logger.info("album: deleted %s (%s)", log_safe(deleted.title), deleted.type.value)
    notifier.publish(EntityEvent.DELETED, deleted.uid, context, entity=album_record(deleted))
    try:
        notifier.client_config(search_service.album_counts(session))
    except SQLAlchemyError as e:
        logger.warning("album: %s (client config)", e)
    save_album_as_yaml(deleted, session)
    notifier.success(i18n.msg("msg_album_deleted", log_safe(deleted.title)))
    return deleted


def restore_album(
    session: Session,
    uid: str,
    context: ActorContext | None,
    notifier: Notifier,
) -> Album:
    """Undo a soft delete."""
    album = search_service.album_by_uid(session, uid, include_deleted=True)
    if not album.is_deleted():
        raise NotFound()
    if album.is_default():
        _check_unique_title(session, album.title, exclude_uid=album.uid)

    album.deleted_at = None
    album.updated_at = _now()
    session.add(album)
    _commit(session, "restore")
    session.refresh(album)

    _after_change(session, album, EntityEvent.UPDATED, context, notifier,
                  toast=i18n.msg("msg_album_restored", log_safe(album.title)))
    return album


def set_favorite(
    session: Session,
    uid: str,
    value: bool,
    context: ActorContext | None,
    notifier: Notifier,
) -> Album:
    album = search_service.album_by_uid(session, uid)
    album.favorite = value
    session.add(album)
    _commit(session, "like" if value else "dislike")
    session.refresh(album)

    _after_change(session, album, EntityEvent.UPDATED, context, notifier)
    return album


# --- Membership ---

def add_photos(session: Session, album: Album, photo_uids: list[str], cache: CoverCache) -> list[str]:
    """Link photos to album. Returns the UIDs that were not linked before.

    Photos that do not exist are skipped, as are photos already in the album.
    """
    if not photo_uids:
        return []

    existing = set(session.exec(
        select(Photo.uid).where(col(Photo.uid).in_(photo_uids), col(Photo.deleted_at).is_(None))
    ).all())

    added: list[str] = []
    now = _now()
    try:
        for uid in photo_uids:
            if uid not in existing or uid in added:
                continue
            stmt = (
                sqlite_insert(PhotoAlbum)
                .values(album_uid=album.uid, photo_uid=uid, added_at=now)
                .on_conflict_do_nothing(index_elements=["album_uid", "photo_uid"])
            )
            if session.execute(stmt).rowcount == 1:
                added.append(uid)
        if added:
            album.updated_at = now
            session.add(album)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("album: %s (add photos)", e)
        raise StorageError() from e

    if added:
        session.refresh(album)
        _invalidate_cover(cache, album.uid)
    return added


def remove_photos(session: Session, album: Album, photo_uids: list[str], cache: CoverCache) -> list[str]:
    """Unlink photos from album. Returns the UIDs that were actually linked."""
    if not photo_uids:
        raise ValidationError(key="err_no_items_selected")

    removed: list[str] = []
    try:
        for uid in photo_uids:
            if uid in removed:
                continue
            result = session.execute(
                delete(PhotoAlbum).where(PhotoAlbum.album_uid == album.uid, PhotoAlbum.photo_uid == uid)
            )
            if result.rowcount > 0:
                removed.append(uid)
        if removed:
            album.updated_at = _now()
            session.add(album)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("album: %s (remove photos)", e)
        raise StorageError() from e

    if removed:
        session.refresh(album)
        _invalidate_cover(cache, album.uid)
    return removed


def clone_into(
    session: Session,
    album: Album,
    source_uids: list[str],
    cache: CoverCache,
    limit: int | None = None,
) -> list[str]:
    """Add the photos of every source album to album.

    Sources that cannot be found or queried are logged and skipped.
    """
    if limit is None:
        limit = settings.clone_limit
    added: list[str] = []
    for source_uid in source_uids:
        try:
            source = search_service.album_by_uid(session, source_uid)
            photo_uids = search_service.album_photo_uids(session, source.uid, limit)
        except NotFound:
            logger.error("album: %s not found (clone)", log_safe(source_uid))
            continue
        except SQLAlchemyError as e:
            logger.error("album: %s (clone %s)", e, log_safe(source_uid))
            continue

        added.extend(add_photos(session, album, photo_uids, cache))
    return added


def _invalidate_cover(cache: CoverCache, album_uid: str) -> None:
    try:
        cache.invalidate(album_uid)
    except Exception as e:
        logger.warning("album: %s (invalidate cover)", e)


# --- Request level operations ---

def add_photos_to_album(
    session: Session,
    uid: str,
    photos: list[str],
    albums: list[str],
    context: ActorContext | None,
    notifier: Notifier,
    cache: CoverCache,
) -> tuple[Album, list[str], list[str]]:
    """Returns (album, selected photo UIDs, newly added UIDs)."""
    album = search_service.album_by_uid(session, uid)

    try:
        selected = search_service.photo_selection(session, photos, albums)
    except SQLAlchemyError as e:
        logger.error("album: %s (photo selection)", e)
        raise ValidationError() from e

    added = add_photos(session, album, selected, cache)

    if added:
        if len(added) == 1:
            toast = i18n.msg("msg_entry_added_to", log_safe(album.title))
        else:
            toast = i18n.msg("msg_entries_added_to", len(added), log_safe(album.title))
        _after_change(session, album, EntityEvent.UPDATED, context, notifier,
                      toast=toast, client_config=False)

    return album, selected, added


def remove_photos_from_album(
    session: Session,
    uid: str,
    photos: list[str],
    context: ActorContext | None,
    notifier: Notifier,
    cache: CoverCache,
) -> tuple[Album, list[str]]:
    """Returns (album, removed UIDs)."""
    if not photos:
        raise ValidationError(key="err_no_items_selected")

    album = search_service.album_by_uid(session, uid)
    removed = remove_photos(session, album, photos, cache)

    if removed:
        if len(removed) == 1:
            toast = i18n.msg("msg_entry_removed_from", log_safe(album.title))
        else:
            toast = i18n.msg("msg_entries_removed_from", len(removed), log_safe(album.title))
        _after_change(session, album, EntityEvent.UPDATED, context, notifier,
                      toast=toast, client_config=False)

    return album, removed


def clone_albums(
    session: Session,
    uid: str,
    source_uids: list[str],
    context: ActorContext | None,
    notifier: Notifier,
    cache: CoverCache,
) -> tuple[Album, list[str]]:
    """Returns (target album, added UIDs across all sources)."""
    album = search_service.album_by_uid(session, uid)
    added = clone_into(session, album, source_uids, cache)

    if added:
        _after_change(session, album, EntityEvent.UPDATED, context, notifier,
                      toast=i18n.msg("msg_selection_added_to", log_safe(album.title)),
                      client_config=False)

    return album, added


def album_cover(session: Session, album: Album, cache: CoverCache) -> Path:
    """File the album cover is shown from, memoised per album."""
    cached = cache.get(album.uid)
    if cached is not None and cached.is_file():
        return cached

    for f in search_service.album_files(session, album.uid, limit=100):
        if not f.hash or f.sidecar:
            continue
        path = file_name(f.root, f.name)
        if path.is_file():
            cache.put(album.uid, path)
            return path

    raise NotFound(key="err_entity_not_found")
