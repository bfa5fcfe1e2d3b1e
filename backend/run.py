#!/usr/bin/env python3
"""
Run script for the media upload backend
"""
import uvicorn
from media_upload.config.settings import load_settings

if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(
        "media_upload.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
