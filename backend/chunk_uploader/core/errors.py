"""
Failures reported by the uploader.

Each error carries the HTTP status the API layer answers with. Filesystem
failures are not wrapped: they surface as the underlying OSError.
"""


class UploadError(Exception):
    status_code = 400
    message = "Upload failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class MissingHeaders(UploadError):
    message = "Missing header(s)"


class FileTooLarge(UploadError):
    status_code = 413
    message = "File is above size limit"


class ChunkTooLarge(UploadError):
    status_code = 413
    message = "Chunk is above size limit"


class ChunkOutOfRange(UploadError):
    message = "Chunk is out of range"


class UploadExpired(UploadError):
    status_code = 410
    message = "Upload has expired"


class MalformedBody(UploadError):
    message = "Malformed multipart body"
