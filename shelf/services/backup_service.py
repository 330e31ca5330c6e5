"""Album YAML backups.

Each album is mirrored to ``<albums_dir>/<type>/<uid>.yml`` so the library can
be rebuilt from files alone. Writing is best-effort: a failed backup is
logged and never fails the request that triggered it.
"""

import logging
from pathlib import Path

import yaml
from sqlmodel import Session, select

from shelf.config import settings
from shelf.models.album import Album, PhotoAlbum
from shelf.utils.sanitize import log as log_safe

logger = logging.getLogger(__name__)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def album_to_dict(album: Album, photos: list[PhotoAlbum]) -> dict:
    """Serializable album fields, keys in display order."""
    data = {
        "UID": album.uid,
        "Slug": album.slug,
        "Type": album.type.value,
        "Title": album.title,
        "Description": album.description or None,
        "Notes": album.notes or None,
        "Category": album.category or None,
        "Location": album.location or None,
        "Order": album.sort_order.value,
        "Favorite": album.favorite,
        "CreatedAt": _iso(album.created_at),
        "UpdatedAt": _iso(album.updated_at),
        "DeletedAt": _iso(album.deleted_at),
        "Photos": [
            {"UID": pa.photo_uid, "AddedAt": _iso(pa.added_at)}
            for pa in photos
        ],
    }
    return {k: v for k, v in data.items() if v is not None}


def save_as_yaml(album: Album, photos: list[PhotoAlbum], file_name: Path) -> None:
    """Write album data to file_name. Raises OSError / yaml.YAMLError."""
    file_name.parent.mkdir(parents=True, exist_ok=True)
    content = yaml.safe_dump(
        album_to_dict(album, photos),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    tmp = file_name.with_suffix(".yml.tmp")
    tmp.write_text(content, encoding="utf-8")
    tmp.replace(file_name)


def save_album_as_yaml(album: Album, session: Session) -> Path | None:
    """Back up album to its YAML sidecar file if backups are enabled."""
    if not settings.backup_yaml:
        return None

    file_name = album.yaml_file_name(settings.albums_dir)

    try:
        photos = session.exec(
            select(PhotoAlbum)
            .where(PhotoAlbum.album_uid == album.uid)
            .order_by(PhotoAlbum.added_at, PhotoAlbum.photo_uid)
        ).all()
        save_as_yaml(album, list(photos), file_name)
    except Exception as e:
        logger.error("album: %s (update yaml)", e)
        return None

    logger.debug("album: updated yaml file %s", log_safe(file_name.name))
    return file_name


def load_yaml(file_name: Path) -> dict:
    """Read a backup file written by save_as_yaml."""
    with open(file_name, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
