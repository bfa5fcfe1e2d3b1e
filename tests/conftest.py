import pytest
from fastapi.testclient import TestClient

from helpers import make_settings
from media_upload.main import create_app


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def upload_dir(client, settings):
    return settings.UPLOAD_DIR


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
