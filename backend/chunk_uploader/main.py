import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from chunk_uploader.api.api_v1.api import api_router
from chunk_uploader.core.config import settings
from chunk_uploader.core.errors import UploadError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"message": "Welcome to Chunk Uploader API"}

@app.exception_handler(UploadError)
async def upload_exception_handler(request: Request, exc: UploadError):
    logger.warning("Upload rejected: %s", exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.__class__.__name__, "detail": exc.detail},
    )

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Global Exception: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation Error: %s", exc)
    return JSONResponse(
        status_code=422,
        content={"message": "Validation Error", "detail": exc.errors()},
    )

@app.on_event("startup")
async def startup_event():
    logger.info("Staging root: %s", settings.UPLOAD_DIR)
    for route in app.routes:
        if hasattr(route, "path"):
            logger.debug("Route %s", route.path)

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8899)
