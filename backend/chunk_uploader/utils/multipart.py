"""
Streaming multipart/form-data decoding on top of python-multipart.

The decoder is push based: the caller feeds raw body blocks and gets back the
file-part bytes found in each block, so no more than one block of the file is
held in memory. Form fields are collected into the shared post_params dict.
Only the first file part is accepted; later file parts are drained.
"""
import logging
from typing import Dict, List, Optional

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header

from chunk_uploader.core.errors import MalformedBody

logger = logging.getLogger(__name__)

_FIELD = "field"
_FILE = "file"
_SKIP = "skip"


class MultipartDecoder:
    def __init__(self, content_type: Optional[str], max_file_size: int, post_params: Dict[str, str]):
        ctype, options = parse_options_header(content_type)
        boundary = options.get(b"boundary")
        if ctype != b"multipart/form-data" or not boundary:
            raise MalformedBody("Expected a multipart/form-data body with a boundary")

        self.post_params = post_params
        self.max_file_size = max_file_size

        self.file_started = False
        self.file_finished = False
        self.file_name: Optional[str] = None
        self.file_size = 0
        self.limit_reached = False

        self._pending: List[bytes] = []
        self._part_headers: Dict[bytes, bytes] = {}
        self._header_name: List[bytes] = []
        self._header_value: List[bytes] = []
        self._kind: Optional[str] = None
        self._field_name: Optional[str] = None
        self._field_value: List[bytes] = []

        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
            },
        )

    def feed(self, data: bytes) -> List[bytes]:
        """Parse one body block, returning the file bytes it contained."""
        try:
            self._parser.write(data)
        except FormParserError as e:
            raise MalformedBody(f"Malformed multipart body: {e}") from e
        pending, self._pending = self._pending, []
        return pending

    def finish(self) -> None:
        self._parser.finalize()

    # --- parser callbacks ---

    def _on_part_begin(self) -> None:
        self._part_headers = {}
        self._kind = None

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name.append(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.append(data[start:end])

    def _on_header_end(self) -> None:
        name = b"".join(self._header_name).lower()
        self._part_headers[name] = b"".join(self._header_value)
        del self._header_name[:]
        del self._header_value[:]

    def _on_headers_finished(self) -> None:
        _, options = parse_options_header(self._part_headers.get(b"content-disposition"))
        field_name = options.get(b"name", b"").decode("latin-1")
        file_name = options.get(b"filename")

        if file_name is None:
            self._kind = _FIELD
            self._field_name = field_name
            self._field_value = []
        elif not self.file_started:
            self._kind = _FILE
            self.file_started = True
            self.file_name = file_name.decode("latin-1")
        else:
            logger.warning("Ignoring extra file part %r", field_name)
            self._kind = _SKIP

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._kind == _FIELD:
            self._field_value.append(data[start:end])
        elif self._kind == _FILE and not self.limit_reached:
            if self.file_size + (end - start) > self.max_file_size:
                self.limit_reached = True
                return
            self.file_size += end - start
            self._pending.append(data[start:end])

    def _on_part_end(self) -> None:
        if self._kind == _FIELD:
            value = b"".join(self._field_value).decode("utf-8", errors="replace")
            self.post_params[self._field_name] = value
            self._field_value = []
        elif self._kind == _FILE:
            self.file_finished = True
        self._kind = None
