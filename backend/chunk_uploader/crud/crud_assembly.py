import logging
from typing import Dict

import aiofiles

from chunk_uploader.crud.crud_staging import CRUDStaging
from chunk_uploader.schemas.upload import AssembledFile, UploadIdentity

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024


class Assembler:
    """
    Deferred reassembly of a fully staged upload.

    Calling the instance writes chunks 0..total-1, in order, to {root}/{file_id}
    (replacing any earlier file of that name) and then purges the staging
    directory. A failure part way leaves the partial output and the remaining
    chunks on disk; calling the same instance again resumes at the failed chunk.
    """

    def __init__(self, staging: CRUDStaging, identity: UploadIdentity, post_params: Dict[str, str]):
        self.staging = staging
        self.file_id = identity.file_id
        self.total_chunks = identity.total_chunks
        self.post_params = post_params
        # First chunk not yet appended, and output length after the chunks before it
        self._next_chunk = 0
        self._offset = 0

    async def __call__(self) -> AssembledFile:
        file_path = self.staging.assembled_path(self.file_id)
        dir_path = self.staging.staging_dir(self.file_id)

        # A retry resumes at the chunk that failed, cutting off whatever part
        # of it had been appended
        async with aiofiles.open(file_path, "ab" if self._next_chunk else "wb") as assembled:
            await assembled.truncate(self._offset)
            for chunk_number in range(self._next_chunk, self.total_chunks):
                chunk_path = self.staging.chunk_path(self.file_id, chunk_number)
                written = 0
                async with aiofiles.open(chunk_path, "rb") as chunk_file:
                    while content := await chunk_file.read(COPY_BUFFER_SIZE):
                        await assembled.write(content)
                        written += len(content)
                self._offset += written
                self._next_chunk = chunk_number + 1

        await self.staging.purge(dir_path)
        logger.info("Assembled upload %s from %d chunks", self.file_id, self.total_chunks)
        return AssembledFile(file_path=file_path, post_params=dict(self.post_params))

    def __repr__(self) -> str:
        return f"Assembler(file_id={self.file_id!r}, total_chunks={self.total_chunks})"
