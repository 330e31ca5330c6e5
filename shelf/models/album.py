"""Album models."""

import secrets
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from sqlmodel import Field, SQLModel

from shelf.utils.sanitize import slugify


class AlbumType(str, Enum):
    DEFAULT = "default"  # manually created
    AUTO = "auto"  # generated from folders, calendar, places


class AlbumOrder(str, Enum):
    OLDEST = "oldest"
    NEWEST = "newest"
    ADDED = "added"
    TITLE = "title"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    uid: str = Field(default_factory=lambda: f"as_{secrets.token_hex(6)}", primary_key=True)
    slug: str = Field(default="", index=True)
    type: AlbumType = Field(default=AlbumType.DEFAULT, index=True)
    title: str
    description: str = ""
    notes: str = ""
    category: str = ""
    location: str = ""
    sort_order: AlbumOrder = Field(default=AlbumOrder.OLDEST)
    favorite: bool = Field(default=False)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    deleted_at: Optional[datetime] = Field(default=None, index=True)

    @classmethod
    def new(cls, title: str, album_type: AlbumType) -> "Album":
        title = title.strip()
        return cls(title=title, slug=slugify(title), type=album_type)

    def is_default(self) -> bool:
        return self.type == AlbumType.DEFAULT

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def zip_name(self) -> str:
        """File name of the downloadable archive."""
        return f"{self.slug or self.uid}.zip"

    def yaml_file_name(self, albums_dir: Path) -> Path:
        return Path(albums_dir) / self.type.value / f"{self.uid}.yml"


class PhotoAlbum(SQLModel, table=True):
    __tablename__ = "photos_albums"

    album_uid: str = Field(foreign_key="albums.uid", primary_key=True)
    photo_uid: str = Field(foreign_key="photos.uid", primary_key=True, index=True)
    added_at: datetime = Field(default_factory=_now)
