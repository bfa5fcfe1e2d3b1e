import cv2
import numpy as np

from media_upload.config.settings import Settings

API_KEY = "test-api-key"
AUTH = {"x-api-key": API_KEY}


def make_image(width: int, height: int, ext: str = ".jpg") -> bytes:
    """Encode a simple gradient image of the given size."""
    row = np.linspace(0, 255, width, dtype=np.uint8)
    image = np.dstack([np.tile(row, (height, 1))] * 3)
    ok, encoded = cv2.imencode(ext, image)
    assert ok
    return encoded.tobytes()


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        API_KEY=API_KEY,
        CORS_ALLOWED_ORIGINS="http://localhost:3000,http://localhost:5173",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        CLEANUP_ENABLED=False,
        IN_USE_URL=None,
        IN_USE_MANIFEST=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)
