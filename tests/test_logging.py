import logging
import os

from helpers import AUTH
from media_upload.config.logging import _PACKAGE_ROOT, _ColoredFormatter


def _record(pathname, level=logging.WARNING):
    return logging.LogRecord("media_upload.test", level, pathname, 12, "hello %s", ("world",), None)


def test_formatter_shortens_package_paths():
    pathname = os.path.join(_PACKAGE_ROOT, "api", "routes", "files.py")
    record = _record(pathname)

    line = _ColoredFormatter("[%(pathname)s:%(lineno)d] %(message)s", use_color=False).format(record)

    assert line == f"[{os.path.join('api', 'routes', 'files.py')}:12] hello world"
    assert record.pathname == pathname


def test_formatter_colors_level_without_touching_record():
    record = _record("/elsewhere/mod.py", logging.ERROR)
    line = _ColoredFormatter("%(levelname)s", use_color=True).format(record)
    assert line == "\033[31mERROR\033[0m"
    assert record.levelname == "ERROR"


def test_processing_failure_is_logged_once_with_traceback(client, caplog):
    files = {"file": ("broken.jpg", b"definitely not a jpeg", "image/jpeg")}
    with caplog.at_level(logging.INFO):
        r = client.post("/upload", files=files, headers=AUTH)
    assert r.status_code == 500

    errors = [rec for rec in caplog.records if rec.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info is not None
    assert "Could not decode image" in caplog.text
