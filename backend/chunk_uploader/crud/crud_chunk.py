import asyncio
import logging
from typing import Dict, Optional

import aiofiles
import aiofiles.os

from chunk_uploader.core.errors import ChunkOutOfRange, UploadError
from chunk_uploader.crud.crud_assembly import Assembler
from chunk_uploader.crud.crud_staging import CRUDStaging
from chunk_uploader.schemas.upload import UploadIdentity

logger = logging.getLogger(__name__)


class ChunkStatus:
    """
    Terminal outcome of one chunk write.

    Resolved once; later resolutions are ignored. wait() may be awaited any
    number of times, before or after resolution, and always yields the same
    outcome: the Assembler (or None) on success, the stored error otherwise.
    """

    def __init__(self):
        self._resolved = asyncio.Event()
        self._assembler: Optional[Assembler] = None
        self._error: Optional[BaseException] = None

    @property
    def done(self) -> bool:
        return self._resolved.is_set()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def set_result(self, assembler: Optional[Assembler]) -> None:
        if self.done:
            return
        self._assembler = assembler
        self._resolved.set()

    def set_error(self, error: BaseException) -> None:
        if self.done:
            return
        self._error = error
        self._resolved.set()

    async def wait(self) -> Optional[Assembler]:
        await self._resolved.wait()
        if self._error is not None:
            raise self._error
        return self._assembler


class ChunkWriter:
    """
    Streams one chunk to {staging_dir}/{chunk_number}.

    Errors never escape open/write/close: they resolve the status instead and
    later writes are dropped, so the caller keeps draining the body.
    """

    def __init__(self, staging: CRUDStaging, identity: UploadIdentity, post_params: Dict[str, str]):
        self.staging = staging
        self.identity = identity
        self.post_params = post_params
        self.status = ChunkStatus()
        self.dir_path = staging.staging_dir(identity.file_id)
        self.chunk_path = staging.chunk_path(identity.file_id, identity.chunk_number)
        self._file = None

    async def open(self) -> None:
        try:
            if not self.identity.in_range:
                raise ChunkOutOfRange()

            if self.identity.chunk_number == 0:
                await self.staging.ensure_exists(self.dir_path)
            else:
                await self.staging.exists_or_expired(self.dir_path)

            self._file = await aiofiles.open(self.chunk_path, "wb")
        except (UploadError, OSError) as e:
            logger.warning("Chunk %s of upload %s rejected: %s",
                           self.identity.chunk_number, self.identity.file_id, e)
            self.status.set_error(e)

    async def write(self, data: bytes) -> None:
        if self._file is None:
            return
        try:
            await self._file.write(data)
        except OSError as e:
            await self.abort(e)

    async def close(self) -> None:
        """Finish the chunk file and resolve the status."""
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            await f.close()
        except OSError as e:
            self.status.set_error(e)
            await self._remove_partial()
            return

        assembler = None
        if self.identity.is_last:
            assembler = Assembler(self.staging, self.identity, self.post_params)

        logger.info("Stored chunk %s/%s of upload %s",
                    self.identity.chunk_number + 1, self.identity.total_chunks, self.identity.file_id)
        self.status.set_result(assembler)

    async def abort(self, error: BaseException) -> None:
        """Fail the chunk and remove whatever part of it reached the disk."""
        self.status.set_error(error)
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            await f.close()
        except OSError as e:
            logger.warning("Could not close partial chunk %s: %s", self.chunk_path, e)
        await self._remove_partial()

    async def _remove_partial(self) -> None:
        try:
            await aiofiles.os.remove(self.chunk_path)
        except OSError as e:
            logger.warning("Could not delete partial chunk %s: %s", self.chunk_path, e)
