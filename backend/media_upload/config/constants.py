"""
Fixed values shared across the upload service.

Tunable limits live in settings.py; this module only holds values that are
part of the HTTP contract or the on-disk format.
"""

API_KEY_HEADER = "x-api-key"

ALLOWED_MIME_PREFIXES = ("image/", "video/")

# Extensions that must decode as images; a buffer that does not is a processing error.
# Other image/* uploads are resized when OpenCV can decode them and stored as uploaded otherwise.
JPEG_EXTENSIONS = {".jpg", ".jpeg"}
PNG_EXTENSIONS = {".png"}
REENCODABLE_EXTENSIONS = JPEG_EXTENSIONS | PNG_EXTENSIONS | {".webp"}

# Stored as uploaded so animation survives.
PASSTHROUGH_IMAGE_EXTENSIONS = {".gif"}

# Encoders that keep more than 8 bits per channel.
HIGH_DEPTH_EXTENSIONS = {".png", ".tif", ".tiff"}

# Leading bytes -> extension, for images whose name carries no usable extension.
IMAGE_SIGNATURES = [
    (b"\xff\xd8\xff", ".jpg"),
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"BM", ".bmp"),
    (b"II*\x00", ".tiff"),
    (b"MM\x00*", ".tiff"),
]

UPLOAD_CHUNK_SIZE = 1024 * 1024

# Response messages
MSG_UPLOAD_OK = "File uploaded & compressed successfully"
MSG_UPLOADS_OK = "Files uploaded & compressed successfully"
MSG_NO_FILE = "No file uploaded"
MSG_NO_FILES = "No files uploaded"
MSG_UPLOAD_FAILED = "Error processing file"
MSG_UPLOADS_FAILED = "Error processing files"
MSG_DELETE_OK = "Delete image successful"
MSG_DELETE_FAILED = "Failed to delete image"
MSG_UNAUTHORIZED = "Unauthorized"
MSG_INVALID_TYPE = "Only image and video files are allowed!"
MSG_TOO_LARGE = "File too large"
MSG_TOO_MANY_FILES = "Too many files"
MSG_INVALID_NAME = "Invalid file name"
