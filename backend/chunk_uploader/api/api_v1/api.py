from fastapi import APIRouter

from chunk_uploader.api.api_v1.endpoints import upload

api_router = APIRouter()
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])
