import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from chunk_uploader import schemas
from chunk_uploader.api import deps
from chunk_uploader.crud.crud_assembly import Assembler
from chunk_uploader.uploader import Uploader
from chunk_uploader.utils.upload_utils import CHUNK_NUMBER_HEADER, FILE_ID_HEADER

logger = logging.getLogger(__name__)

router = APIRouter()


async def run_assembly(assembler: Assembler) -> None:
    try:
        assembled = await assembler()
    except OSError:
        # Partial output and staged chunks stay on disk for inspection
        logger.exception("Assembly of upload %s failed", assembler.file_id)
        return
    logger.info("Upload %s assembled at %s", assembler.file_id, assembled.file_path)


@router.post("", response_model=schemas.ChunkUploadResponse)
async def upload_chunk(
        *,
        request: Request,
        background_tasks: BackgroundTasks,
        uploader: Uploader = Depends(deps.get_uploader),
) -> Any:
    """
    Upload one chunk (multipart/form-data, identified by the uploader-* headers).
    The file is assembled in the background once the last chunk is stored.
    """
    assembler = await uploader.upload_file(request.headers, request.stream())

    if assembler is not None:
        background_tasks.add_task(run_assembly, assembler)

    chunk_number = int(request.headers[CHUNK_NUMBER_HEADER])
    logger.info("Accepted chunk %s of upload %s", chunk_number, request.headers[FILE_ID_HEADER])
    return {"status": "ok", "chunk_number": chunk_number, "assembling": assembler is not None}
