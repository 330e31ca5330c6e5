"""Album service error taxonomy.

Each error carries the HTTP status and message key it is rendered with, so
services can raise them without knowing about the transport.
"""

from shelf import i18n


class AlbumError(Exception):
    status_code = 500
    key = "err_bad_request"

    def __init__(self, *args, key: str | None = None):
        if key is not None:
            self.key = key
        self.args_ = args
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return i18n.msg(self.key, *self.args_)


class Unauthorized(AlbumError):
    status_code = 401
    key = "err_unauthorized"


class NotFound(AlbumError):
    status_code = 404
    key = "err_album_not_found"


class ValidationError(AlbumError):
    status_code = 400
    key = "err_bad_request"


class Conflict(AlbumError):
    status_code = 409
    key = "err_already_exists"


class StorageError(AlbumError):
    status_code = 500
    key = "err_save_failed"


class ExportError(AlbumError):
    status_code = 500
    key = "err_zip_failed"
