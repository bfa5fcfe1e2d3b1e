"""
Image Compression Step

Responsibilities:
- Turn an uploaded byte buffer into a stored file named `{unix_ms}-{original_name}`.
- Resize every image OpenCV can decode down to a maximum width, keeping aspect ratio.
- Write it back in the stored name's format when OpenCV can, else in the source format.
- Apply format-specific encoder settings (JPEG quality, PNG compression level).
- Store video, GIF and undecodable images byte-for-byte.

Functions / Classes:
    build_output_name(original_name) -> str
    resize_to_width(image, max_width) -> np.ndarray
    encoder_extension(ext, buffer) -> str
    ImageCompressor.compress(buffer, original_name, mime) -> Path        (blocking)
    ImageCompressor.compress_async(buffer, original_name, mime) -> Path  (thread pool)

NOTE:
Two uploads with the same original name processed within the same millisecond
map to the same output name; the later write wins.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
from starlette.concurrency import run_in_threadpool

from media_upload.config import constants as C
from media_upload.config.settings import Settings
from media_upload.shared.exceptions import ProcessingError

logger = logging.getLogger(__name__)


def build_output_name(original_name: str) -> str:
    """Timestamp-prefixed name; only the last path component of the client name is kept."""
    base = Path(original_name.replace("\\", "/")).name or "file"
    return f"{int(time.time() * 1000)}-{base}"


def png_compression_level(quality: int) -> int:
    """Map a 0-100 quality to a zlib level 0-9 (lower quality, harder compression)."""
    quality = max(0, min(100, quality))
    return round(9 * (100 - quality) / 100)


def resize_to_width(image: np.ndarray, max_width: int) -> np.ndarray:
    """
    Downscale so width <= max_width, preserving aspect ratio.

    Images already narrow enough are returned unchanged.
    """
    h, w = image.shape[:2]
    if w <= max_width:
        return image

    new_w = max_width
    new_h = max(1, round(h * max_width / w))
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    logger.debug("[compression] Resized %dx%d -> %dx%d", w, h, new_w, new_h)
    return resized


def _to_8bit(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint8:
        return image
    if image.dtype == np.uint16:
        return (image // 257).astype(np.uint8)
    return cv2.convertScaleAbs(image)


def sniff_extension(buffer: bytes) -> str:
    """Extension of the image format the leading bytes identify, or "" if unknown."""
    for signature, ext in C.IMAGE_SIGNATURES:
        if buffer.startswith(signature):
            return ext
    if buffer[:4] == b"RIFF" and buffer[8:12] == b"WEBP":
        return ".webp"
    return ""


def encoder_extension(ext: str, buffer: bytes) -> str:
    """
    Pick the format a decoded image is written back in.

    The stored name's extension wins when OpenCV has a writer for it; otherwise
    the source format, then PNG.
    """
    if ext and cv2.haveImageWriter("x" + ext):
        return ext
    sniffed = sniff_extension(buffer)
    if sniffed and cv2.haveImageWriter("x" + sniffed):
        return sniffed
    return ".png"


class ImageCompressor:
    """Compression step bound to one storage directory and one set of encoder settings."""

    def __init__(
        self,
        storage_dir: str | Path,
        *,
        max_width: int = 800,
        jpeg_quality: int = 80,
        png_quality: int = 80,
    ) -> None:
        self.storage_dir = Path(storage_dir)
        self.max_width = max_width
        self.jpeg_quality = jpeg_quality
        self.png_quality = png_quality

    @classmethod
    def from_settings(cls, settings: Settings, storage_dir: str | Path) -> "ImageCompressor":
        return cls(
            storage_dir,
            max_width=settings.RESIZE_WIDTH,
            jpeg_quality=settings.JPEG_QUALITY,
            png_quality=settings.PNG_QUALITY,
        )

    def _encode_params(self, ext: str) -> List[int]:
        if ext in C.JPEG_EXTENSIONS:
            return [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality]
        if ext in C.PNG_EXTENSIONS:
            return [cv2.IMWRITE_PNG_COMPRESSION, png_compression_level(self.png_quality)]
        return []

    @staticmethod
    def _decode(buffer: bytes) -> Optional[np.ndarray]:
        image = cv2.imdecode(np.frombuffer(buffer, np.uint8), cv2.IMREAD_UNCHANGED)
        if image is None or image.size == 0:
            return None
        return image

    def _encode(self, image: np.ndarray, ext: str) -> bytes:
        image = resize_to_width(image, self.max_width)

        if ext not in C.HIGH_DEPTH_EXTENSIONS:
            image = _to_8bit(image)
        if ext in C.JPEG_EXTENSIONS and image.ndim == 3 and image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

        success, encoded = cv2.imencode(ext, image, self._encode_params(ext))
        if not success:
            raise ProcessingError("Could not encode image", details={"ext": ext})
        return encoded.tobytes()

    def _process(self, buffer: bytes, ext: str, mime: Optional[str]) -> bytes:
        """Return the bytes to store: a resized re-encode, or the upload unchanged."""
        if (mime or "").startswith("video/") or ext in C.PASSTHROUGH_IMAGE_EXTENSIONS:
            return buffer

        image = self._decode(buffer)
        if image is None:
            if ext in C.REENCODABLE_EXTENSIONS:
                raise ProcessingError("Could not decode image", details={"ext": ext})
            logger.debug("[compression] Not decodable as image, storing as uploaded (ext=%r)", ext)
            return buffer

        return self._encode(image, encoder_extension(ext, buffer))

    def compress(self, buffer: bytes, original_name: str, mime: Optional[str] = None) -> Path:
        """
        Write `buffer` to storage and return the output path.

        Any decodable image is resized; video and undecodable non-JPEG/PNG/WebP
        payloads are stored byte-for-byte.

        Raises:
            ProcessingError: a JPEG/PNG/WebP upload could not be decoded/encoded,
                or the output could not be written.
        """
        output_name = build_output_name(original_name)
        output_path = self.storage_dir / output_name

        data = self._process(buffer, output_path.suffix.lower(), mime)

        try:
            output_path.write_bytes(data)
        except OSError as e:
            raise ProcessingError("Could not write output file", details={"name": output_name}) from e

        logger.info(
            "[compression] Stored %s (%d -> %d bytes)", output_name, len(buffer), len(data)
        )
        return output_path

    async def compress_async(self, buffer: bytes, original_name: str, mime: Optional[str] = None) -> Path:
        return await run_in_threadpool(self.compress, buffer, original_name, mime)


__all__ = [
    "ImageCompressor",
    "build_output_name",
    "encoder_extension",
    "sniff_extension",
    "png_compression_level",
    "resize_to_width",
]
