from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3008
    DEBUG: bool = False

    # Access control (both required, no defaults)
    API_KEY: str
    CORS_ALLOWED_ORIGINS: str

    # Storage
    UPLOAD_DIR: str = "public/uploads"
    PUBLIC_URL_PREFIX: str = "/public/uploads"

    # Upload limits
    MAX_FILE_SIZE: int = 50 * 1024 * 1024
    MAX_FILES: int = 10

    # Compression Settings
    RESIZE_WIDTH: int = 800
    JPEG_QUALITY: int = 80
    PNG_QUALITY: int = 80

    # Cleanup Settings
    CLEANUP_ENABLED: bool = True
    CLEANUP_CRON: str = "0 2 * * *"
    CLEANUP_TIMEZONE: Optional[str] = None
    IN_USE_URL: Optional[str] = None
    IN_USE_MANIFEST: Optional[str] = None
    IN_USE_API_KEY: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"
        frozen = True

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


def load_settings(**overrides) -> Settings:
    """Build the process-wide settings once at startup."""
    return Settings(**overrides)
