import re
from typing import Mapping

from chunk_uploader.schemas.upload import UploadIdentity

FILE_ID_HEADER = "uploader-file-id"
CHUNK_NUMBER_HEADER = "uploader-chunk-number"
CHUNKS_TOTAL_HEADER = "uploader-chunks-total"

REQUIRED_HEADERS = (FILE_ID_HEADER, CHUNK_NUMBER_HEADER, CHUNKS_TOTAL_HEADER)

_DIGITS = re.compile(r"[0-9]+")


def check_headers(headers: Mapping[str, str]) -> bool:
    """
    Make sure the required uploader-* headers are present and are numbers.
    """
    for name in REQUIRED_HEADERS:
        value = headers.get(name)
        if not value or not _DIGITS.fullmatch(value):
            return False
    return True


def parse_identity(headers: Mapping[str, str]) -> UploadIdentity:
    # headers must already have passed check_headers
    return UploadIdentity(
        file_id=headers[FILE_ID_HEADER],
        chunk_number=int(headers[CHUNK_NUMBER_HEADER]),
        total_chunks=int(headers[CHUNKS_TOTAL_HEADER]),
    )


def check_total_size(max_file_size: float, max_chunk_size: float, total_chunks: int) -> bool:
    """
    Worst-case check on the declared chunk count: every chunk is assumed to be
    max_chunk_size, so a file whose last chunk is short can still be refused.
    """
    return max_chunk_size * total_chunks <= max_file_size
