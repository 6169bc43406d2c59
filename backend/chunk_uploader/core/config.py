import logging
import os
from pydantic import BaseModel
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Explicitly load .env file before defining Settings
env_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
load_dotenv(env_path)

class Settings(BaseSettings):
    PROJECT_NAME: str = "Chunk Uploader"
    API_V1_STR: str = "/api/v1"

    # Storage
    UPLOAD_DIR: str = os.path.join(os.getcwd(), "upload_storage")

    # Limits, in MB
    MAX_FILE_SIZE: float = 1024
    MAX_CHUNK_SIZE: float = 10

    # Staging directories older than this are removed by the sweep
    STAGING_MAX_AGE_HOURS: float = 24

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True


class UploaderConfig(BaseModel):
    """
    Options handed to the Uploader at construction.
    max_file_size and max_chunk_size share one unit (MB).
    """
    staging_root: str
    max_file_size: float
    max_chunk_size: float

    @property
    def max_chunk_bytes(self) -> int:
        return int(self.max_chunk_size * 1000 * 1000)

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploaderConfig":
        return cls(
            staging_root=settings.UPLOAD_DIR,
            max_file_size=settings.MAX_FILE_SIZE,
            max_chunk_size=settings.MAX_CHUNK_SIZE,
        )


settings = Settings()

# Ensure the staging root exists
if not os.path.exists(settings.UPLOAD_DIR):
    try:
        os.makedirs(settings.UPLOAD_DIR)
    except OSError as e:
        logger.warning("Could not create upload dir %s: %s", settings.UPLOAD_DIR, e)
