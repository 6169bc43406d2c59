from .crud_staging import CRUDStaging
from .crud_chunk import ChunkStatus, ChunkWriter
from .crud_assembly import Assembler
