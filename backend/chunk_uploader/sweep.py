"""
Remove abandoned staging directories.

Run periodically (e.g. from cron): python -m chunk_uploader.sweep
"""
import asyncio
import logging
import os
import time
from typing import List, Optional

import aiofiles.os

from chunk_uploader.core.config import settings
from chunk_uploader.crud.crud_staging import STAGING_SUFFIX, CRUDStaging

logger = logging.getLogger(__name__)


async def sweep_staging(staging: CRUDStaging, max_age: float, now: Optional[float] = None) -> List[str]:
    """
    Purge every {file_id}_tmp directory not modified in the last max_age seconds.
    Returns the names of the purged directories.
    """
    if now is None:
        now = time.time()

    removed = []
    for name in sorted(await aiofiles.os.listdir(staging.root)):
        if not name.endswith(STAGING_SUFFIX):
            continue
        path = os.path.join(staging.root, name)
        try:
            stat = await aiofiles.os.stat(path)
            if not await aiofiles.os.path.isdir(path) or now - stat.st_mtime <= max_age:
                continue
            await staging.purge(path)
        except FileNotFoundError:
            # Assembled or swept by someone else meanwhile
            continue
        removed.append(name)
    return removed


def main() -> None:
    staging = CRUDStaging(settings.UPLOAD_DIR)
    max_age = settings.STAGING_MAX_AGE_HOURS * 3600
    logger.info("Sweeping %s (max age %.1fh)", staging.root, settings.STAGING_MAX_AGE_HOURS)
    removed = asyncio.run(sweep_staging(staging, max_age))
    logger.info("Removed %d expired staging dir(s)", len(removed))


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    main()
