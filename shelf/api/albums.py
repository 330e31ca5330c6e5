"""Album API endpoints."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from shelf import i18n
from shelf.acl import Action, Resource
from shelf.api.deps import (
    get_cover_cache,
    get_notifier,
    require,
    require_download_token,
)
from shelf.config import settings
from shelf.database import get_session
from shelf.errors import NotFound
from shelf.models.album import Album, AlbumType, PhotoAlbum
from shelf.schemas.album import (
    AddPhotosResponse,
    AlbumCreateRequest,
    AlbumResponse,
    AlbumUpdateRequest,
    CloneResponse,
    RemovePhotosResponse,
    SelectionRequest,
    StatusResponse,
)
from shelf.services import album_service, search_service
from shelf.services.cover_cache import CoverCache
from shelf.services.events import ActorContext, Notifier
from shelf.services.export_service import stream_zip

router = APIRouter(prefix="/albums", tags=["albums"])


def _photo_count(album_uid: str, session: Session) -> int:
    return session.exec(
        select(func.count()).select_from(PhotoAlbum).where(PhotoAlbum.album_uid == album_uid)
    ).one()


def _album_to_response(album: Album, session: Session) -> AlbumResponse:
    record = album_service.album_record(album)
    return AlbumResponse(**record, photo_count=_photo_count(album.uid, session))


@router.get("", response_model=list[AlbumResponse])
def list_albums(
    q: str | None = Query(default=None),
    type: AlbumType | None = Query(default=None),
    favorite: bool | None = Query(default=None),
    count: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.READ)),
    session: Session = Depends(get_session),
):
    """List albums that are not deleted."""
    albums = search_service.list_albums(session, q, type, favorite, count, offset)
    return [_album_to_response(a, session) for a in albums]


@router.post("", response_model=AlbumResponse)
def create_album(
    request: AlbumCreateRequest,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.CREATE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Create a new album."""
    album = album_service.create_album(session, request.title, request.favorite, actor, notifier)
    return _album_to_response(album, session)


@router.get("/{uid}", response_model=AlbumResponse)
def get_album(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.READ)),
    session: Session = Depends(get_session),
):
    """Get album details."""
    album = album_service.get_album(session, uid)
    return _album_to_response(album, session)


@router.put("/{uid}", response_model=AlbumResponse)
def update_album(
    uid: str,
    request: AlbumUpdateRequest,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.UPDATE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Update album metadata like title and description."""
    album = album_service.update_album(session, uid, request.to_patch(), actor, notifier)
    return _album_to_response(album, session)


@router.delete("/{uid}", response_model=AlbumResponse)
def delete_album(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.DELETE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Delete an album. Manually created albums can be restored later."""
    album = album_service.delete_album(session, uid, actor, notifier)
    return AlbumResponse(**album_service.album_record(album), photo_count=_photo_count(album.uid, session))


@router.post("/{uid}/restore", response_model=AlbumResponse)
def restore_album(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.DELETE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Restore a deleted album."""
    album = album_service.restore_album(session, uid, actor, notifier)
    return _album_to_response(album, session)


@router.post("/{uid}/like", response_model=StatusResponse)
def like_album(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.LIKE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Set the favorite flag."""
    album_service.set_favorite(session, uid, True, actor, notifier)
    return i18n.response(200, "msg_changes_saved")


@router.delete("/{uid}/like", response_model=StatusResponse)
def dislike_album(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.LIKE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Remove the favorite flag."""
    album_service.set_favorite(session, uid, False, actor, notifier)
    return i18n.response(200, "msg_changes_saved")


@router.post("/{uid}/clone", response_model=CloneResponse)
def clone_albums(
    uid: str,
    request: SelectionRequest,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.UPDATE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    cache: CoverCache = Depends(get_cover_cache),
):
    """Add the photos of other albums to this album."""
    album, added = album_service.clone_albums(session, uid, request.albums, actor, notifier, cache)
    return CloneResponse(
        **i18n.response(200, "msg_album_cloned"),
        album=_album_to_response(album, session),
        added=added,
    )


@router.post("/{uid}/photos", response_model=AddPhotosResponse)
def add_photos_to_album(
    uid: str,
    request: SelectionRequest,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.UPDATE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    cache: CoverCache = Depends(get_cover_cache),
):
    """Add photos to an album."""
    album, selected, added = album_service.add_photos_to_album(
        session, uid, request.photos, request.albums, actor, notifier, cache
    )
    return AddPhotosResponse(
        **i18n.response(200, "msg_changes_saved"),
        album=_album_to_response(album, session),
        photos=selected,
        added=added,
    )


@router.delete("/{uid}/photos", response_model=RemovePhotosResponse)
def remove_photos_from_album(
    uid: str,
    request: SelectionRequest,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.UPDATE)),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    cache: CoverCache = Depends(get_cover_cache),
):
    """Remove photos from an album."""
    album, removed = album_service.remove_photos_from_album(
        session, uid, request.photos, actor, notifier, cache
    )
    return RemovePhotosResponse(
        **i18n.response(200, "msg_changes_saved"),
        album=_album_to_response(album, session),
        photos=request.photos,
        removed=removed,
    )


@router.get("/{uid}/cover")
def get_album_cover(
    uid: str,
    actor: ActorContext = Depends(require(Resource.ALBUMS, Action.READ)),
    session: Session = Depends(get_session),
    cache: CoverCache = Depends(get_cover_cache),
):
    """Serve the image the album cover is shown from."""
    album = album_service.get_album(session, uid)
    path = album_service.album_cover(session, album, cache)
    return FileResponse(path=str(path))


@router.get("/{uid}/dl", dependencies=[Depends(require_download_token)])
def download_album(
    uid: str,
    session: Session = Depends(get_session),
):
    """Stream the album's original files as zip archive."""
    album = search_service.album_by_uid(session, uid)

    try:
        files = search_service.album_files(session, album.uid, settings.export_limit)
    except SQLAlchemyError as e:
        raise NotFound(key="err_entity_not_found") from e

    zip_name = album.zip_name()
    return StreamingResponse(
        stream_zip(album, files),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{zip_name}"'},
    )
