"""Album request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from shelf.models.album import AlbumOrder


class AlbumCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=160)
    favorite: bool = False


class AlbumUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=160)
    description: Optional[str] = Field(default=None, max_length=2048)
    notes: Optional[str] = Field(default=None, max_length=1024)
    category: Optional[str] = Field(default=None, max_length=100)
    location: Optional[str] = Field(default=None, max_length=160)
    order: Optional[AlbumOrder] = None
    favorite: Optional[bool] = None

    def to_patch(self) -> dict:
        """Fields that were sent, keyed by model attribute name."""
        patch = self.model_dump(exclude_unset=True)
        if "order" in patch:
            patch["sort_order"] = patch.pop("order")
        return patch


class SelectionRequest(BaseModel):
    albums: list[str] = []
    photos: list[str] = []


class AlbumResponse(BaseModel):
    uid: str
    slug: str
    type: str
    title: str
    description: str
    notes: str
    category: str
    location: str
    order: str
    favorite: bool
    photo_count: int
    created_at: Optional[str]
    updated_at: Optional[str]
    deleted_at: Optional[str] = None


class StatusResponse(BaseModel):
    code: int
    message: str


class CloneResponse(StatusResponse):
    album: AlbumResponse
    added: list[str]


class AddPhotosResponse(StatusResponse):
    album: AlbumResponse
    photos: list[str]
    added: list[str]


class RemovePhotosResponse(StatusResponse):
    album: AlbumResponse
    photos: list[str]
    removed: list[str]
