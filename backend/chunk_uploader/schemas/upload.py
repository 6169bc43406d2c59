from typing import Dict
from pydantic import BaseModel, ConfigDict


class UploadIdentity(BaseModel):
    """Identity of one chunk, parsed from the uploader-* headers."""
    model_config = ConfigDict(frozen=True)

    file_id: str
    chunk_number: int
    total_chunks: int

    @property
    def in_range(self) -> bool:
        return 0 <= self.chunk_number < self.total_chunks

    @property
    def is_last(self) -> bool:
        return self.chunk_number == self.total_chunks - 1


# Result of a successful assembly
class AssembledFile(BaseModel):
    file_path: str
    post_params: Dict[str, str] = {}


class ChunkUploadResponse(BaseModel):
    status: str = "ok"
    chunk_number: int
    assembling: bool = False
