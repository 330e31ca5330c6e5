"""Photo and File models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

ROOT_ORIGINALS = "/"
ROOT_SIDECAR = "sidecar"


class Photo(SQLModel, table=True):
    __tablename__ = "photos"

    uid: str = Field(default_factory=lambda: f"ps_{secrets.token_hex(6)}", primary_key=True)
    title: str = ""
    taken_at: Optional[datetime] = Field(default=None, index=True)
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class File(SQLModel, table=True):
    __tablename__ = "files"

    uid: str = Field(default_factory=lambda: f"fs_{secrets.token_hex(6)}", primary_key=True)
    photo_uid: str = Field(foreign_key="photos.uid", index=True)
    root: str = Field(default=ROOT_ORIGINALS)  # '/' | 'sidecar'
    name: str  # path relative to root
    hash: str = Field(default="", index=True)
    sidecar: bool = Field(default=False)
    primary: bool = Field(default=False)
    mime_type: str = ""
