"""Pytest configuration and fixtures for chunk-uploader tests."""

import os
import tempfile

# Keep the settings-created staging root out of the working tree
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="chunk-uploader-"))

import pytest

from chunk_uploader.core.config import UploaderConfig
from chunk_uploader.crud.crud_staging import CRUDStaging
from chunk_uploader.uploader import Uploader

BOUNDARY = "----chunkuploaderboundary"


@pytest.fixture
def staging_root(tmp_path):
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def staging(staging_root):
    return CRUDStaging(str(staging_root))


@pytest.fixture
def config(staging_root):
    return UploaderConfig(staging_root=str(staging_root), max_file_size=1000, max_chunk_size=10)


@pytest.fixture
def uploader(config):
    return Uploader(config)


@pytest.fixture
def multipart_body():
    """Build a multipart/form-data body: fields first, then one file part."""
    def build(file_content=b"", fields=None, file_name="blob", extra_files=()):
        lines = []
        for name, value in (fields or {}).items():
            lines.append(
                f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
                + value.encode() + b"\r\n"
            )
        files = [(file_name, file_content)] + list(extra_files)
        for name, content in files:
            if content is None:
                continue
            lines.append(
                f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="file"; filename="{name}"\r\n'
                f"Content-Type: application/octet-stream\r\n\r\n".encode()
                + content + b"\r\n"
            )
        lines.append(f"--{BOUNDARY}--\r\n".encode())
        return b"".join(lines)
    return build


@pytest.fixture
def upload_headers():
    def build(file_id="42", chunk_number=0, total_chunks=3, **extra):
        headers = {
            "uploader-file-id": str(file_id),
            "uploader-chunk-number": str(chunk_number),
            "uploader-chunks-total": str(total_chunks),
            "content-type": f"multipart/form-data; boundary={BOUNDARY}",
        }
        headers.update(extra)
        return headers
    return build


@pytest.fixture
def body_stream():
    """Turn bytes into an async iterator of small blocks, like a request body."""
    def build(data, block_size=7):
        async def stream():
            for i in range(0, len(data), block_size):
                yield data[i:i + block_size]
        return stream()
    return build


@pytest.fixture
def untouched_body():
    """A body that fails the test if anyone reads it."""
    async def stream():
        raise AssertionError("body must not be read")
        yield b""  # pragma: no cover
    return stream()
