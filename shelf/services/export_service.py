"""Album download: stream original files as a single zip archive.

The zip is written into a sink that hands finished chunks to the HTTP
response as they are produced, so archives of any size are streamed without
being buffered in memory or on disk.
"""

import logging
import time
import zipfile
from pathlib import Path
from typing import Iterable, Iterator

from shelf.config import settings
from shelf.errors import ExportError
from shelf.models.album import Album
from shelf.models.photo import ROOT_SIDECAR
from shelf.services.search_service import FileResult
from shelf.utils.sanitize import log as log_safe
from shelf.utils.sanitize import title_slug

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class StreamSink:
    """Write-only, non-seekable file object collecting zip output."""

    def __init__(self):
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        if data:
            self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def file_name(root: str, name: str) -> Path:
    """Absolute path of a file stored relative to one of the library roots."""
    base = settings.sidecar_dir if root == ROOT_SIDECAR else settings.originals_dir
    return Path(base) / name


def share_base(f: FileResult, seq: int = 0) -> str:
    """Shareable file name, e.g. '20240612-183012-Sunset-At-The-Lake.jpg'.

    Falls back to the file's own base name if the photo has no title or date.
    A sequence number > 0 is appended as ' (n)' before the extension.
    """
    original = Path(f.name)
    ext = original.suffix
    slug = title_slug(f.photo_title)

    if slug and f.taken_at:
        stem = f"{f.taken_at.strftime('%Y%m%d-%H%M%S')}-{slug}"
    else:
        stem = original.stem or f.hash

    if seq > 0:
        return f"{stem} ({seq}){ext}"
    return f"{stem}{ext}"


def alias_for(f: FileResult, aliases: dict[str, int]) -> str:
    """Unique archive name for f within one download.

    aliases counts occurrences per lower-cased base name: the first file
    keeps the base name, later ones get sequence 1, 2, 3 ...
    """
    alias = share_base(f, 0)
    key = alias.lower()
    seq = aliases.get(key, 0)
    if seq > 0:
        alias = share_base(f, seq)
    aliases[key] = seq + 1
    return alias


def _write_file(zf: zipfile.ZipFile, sink: StreamSink, source: Path, alias: str) -> Iterator[bytes]:
    # Files older than 1980 are stored with the earliest zip timestamp
    info = zipfile.ZipInfo.from_file(source, arcname=alias, strict_timestamps=False)
    info.compress_type = zipfile.ZIP_DEFLATED
    with open(source, "rb") as src, zf.open(info, "w") as dest:
        while True:
            chunk = src.read(CHUNK_SIZE)
            if not chunk:
                break
            dest.write(chunk)
            data = sink.drain()
            if data:
                yield data


def stream_zip(album: Album, files: Iterable[FileResult]) -> Iterator[bytes]:
    """Yield the bytes of a zip archive containing the album's original files.

    Files without hash and sidecar files are skipped, as are files missing
    on disk. A failed write raises ExportError since the partial archive
    cannot be trusted. The archive is finalized on every exit path.
    """
    start = time.perf_counter()
    sink = StreamSink()
    zf = zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED)
    aliases: dict[str, int] = {}
    added = 0

    try:
        for f in files:
            if not f.hash:
                logger.warning("download: empty file hash, skipped %s", log_safe(f.name))
                continue

            if f.sidecar:
                logger.debug("download: skipped sidecar %s", log_safe(f.name))
                continue

            source = file_name(f.root, f.name)
            alias = alias_for(f, aliases)

            if not source.is_file():
                logger.error("download: failed finding %s", log_safe(f.name))
                continue

            try:
                yield from _write_file(zf, sink, source, alias)
            except (OSError, zipfile.BadZipFile, ValueError) as e:
                logger.error("download: %s (%s)", e, log_safe(f.name))
                raise ExportError() from e

            added += 1
            logger.info("download: added %s as %s", log_safe(f.name), log_safe(alias))
    finally:
        zf.close()

    data = sink.drain()
    if data:
        yield data

    logger.info(
        "download: created %s with %d files [%.0f ms]",
        log_safe(album.zip_name()), added, (time.perf_counter() - start) * 1000,
    )
