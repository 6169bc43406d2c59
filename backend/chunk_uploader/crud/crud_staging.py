import logging
import os
from typing import List

import aiofiles.os

from chunk_uploader.core.errors import UploadExpired

logger = logging.getLogger(__name__)

STAGING_SUFFIX = "_tmp"


class CRUDStaging:
    """
    Per-upload staging directories under one root.

    Layout: {root}/{file_id}_tmp/{chunk_number} while chunks arrive,
    {root}/{file_id} once assembled.
    """

    def __init__(self, root: str):
        self.root = root

    def staging_dir(self, file_id: str) -> str:
        return os.path.join(self.root, f"{file_id}{STAGING_SUFFIX}")

    def chunk_path(self, file_id: str, chunk_number: int) -> str:
        return os.path.join(self.staging_dir(file_id), str(chunk_number))

    def assembled_path(self, file_id: str) -> str:
        return os.path.join(self.root, file_id)

    async def ensure_exists(self, path: str) -> None:
        # mkdir is atomic; an existing directory is fine
        try:
            await aiofiles.os.mkdir(path)
        except FileExistsError:
            pass

    async def exists_or_expired(self, path: str) -> None:
        if not await aiofiles.os.path.isdir(path):
            raise UploadExpired()

    async def purge(self, path: str) -> List[str]:
        """
        Delete every file in the directory, then the directory.
        Per-file failures are logged and do not stop the others.
        Returns the names that could not be deleted.
        """
        failed = []
        for name in await aiofiles.os.listdir(path):
            try:
                await aiofiles.os.remove(os.path.join(path, name))
            except OSError as e:
                logger.warning("Could not delete staged chunk %s/%s: %s", path, name, e)
                failed.append(name)

        try:
            await aiofiles.os.rmdir(path)
        except OSError as e:
            logger.warning("Could not delete staging dir %s: %s", path, e)
        return failed
