import logging
from typing import AsyncIterator, Dict, Mapping, Optional

from chunk_uploader.core.config import UploaderConfig
from chunk_uploader.core.errors import ChunkTooLarge, FileTooLarge, MalformedBody, MissingHeaders
from chunk_uploader.crud.crud_assembly import Assembler
from chunk_uploader.crud.crud_chunk import ChunkWriter
from chunk_uploader.crud.crud_staging import CRUDStaging
from chunk_uploader.utils.multipart import MultipartDecoder
from chunk_uploader.utils.upload_utils import check_headers, check_total_size, parse_identity

logger = logging.getLogger(__name__)


async def drain(body: AsyncIterator[bytes]) -> None:
    async for _ in body:
        pass


class Uploader:
    """
    Accepts one chunk per request.

    upload_file validates the uploader-* headers and the declared size, streams
    the multipart body to the staging directory and returns the Assembler when
    the stored chunk was the last one (None otherwise). Running the Assembler
    is left to the caller.
    """

    def __init__(self, config: UploaderConfig):
        self.config = config
        self.staging = CRUDStaging(config.staging_root)

    async def upload_file(
        self, headers: Mapping[str, str], body: AsyncIterator[bytes]
    ) -> Optional[Assembler]:
        if not check_headers(headers):
            raise MissingHeaders()

        identity = parse_identity(headers)
        if not check_total_size(self.config.max_file_size, self.config.max_chunk_size, identity.total_chunks):
            raise FileTooLarge()

        post_params: Dict[str, str] = {}
        writer: Optional[ChunkWriter] = None

        try:
            decoder = MultipartDecoder(headers.get("content-type"), self.config.max_chunk_bytes, post_params)
            async for data in body:
                pieces = decoder.feed(data)

                if decoder.file_started and writer is None:
                    writer = ChunkWriter(self.staging, identity, post_params)
                    await writer.open()

                for piece in pieces:
                    await writer.write(piece)

                if writer is not None:
                    if decoder.limit_reached:
                        await writer.abort(ChunkTooLarge())
                    elif decoder.file_finished:
                        await writer.close()
            decoder.finish()
        except MalformedBody as e:
            if writer is not None:
                await writer.abort(e)
            await drain(body)
            raise
        except Exception as e:
            if writer is not None:
                await writer.abort(e)
            raise

        if decoder.limit_reached:
            logger.warning("Chunk %s of upload %s is above %d bytes",
                           identity.chunk_number, identity.file_id, self.config.max_chunk_bytes)
            raise ChunkTooLarge()

        if writer is None:
            raise MalformedBody("No file part in request")

        if not decoder.file_finished:
            await writer.abort(MalformedBody("Incomplete file part"))

        return await writer.status.wait()
