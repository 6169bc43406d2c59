from functools import lru_cache

from chunk_uploader.core.config import UploaderConfig, settings
from chunk_uploader.uploader import Uploader


@lru_cache()
def get_uploader() -> Uploader:
    return Uploader(UploaderConfig.from_settings(settings))
