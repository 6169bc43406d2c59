from .upload import UploadIdentity, AssembledFile, ChunkUploadResponse
