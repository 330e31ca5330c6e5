"""Shelf Database Models."""

from shelf.models.photo import File, Photo
from shelf.models.album import Album, AlbumOrder, AlbumType, PhotoAlbum

__all__ = [
    "Photo",
    "File",
    "Album",
    "AlbumOrder",
    "AlbumType",
    "PhotoAlbum",
]
