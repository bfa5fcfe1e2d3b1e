import asyncio
import os

import pytest

from helpers import AUTH, make_image
from media_upload.core.file_utils.storage import LocalStorage
from media_upload.shared.exceptions import StorageError, ValidationError


def test_delete_uploaded_file(client, upload_dir):
    files = {"file": ("photo.jpg", make_image(100, 100), "image/jpeg")}
    name = client.post("/upload", files=files, headers=AUTH).json()["fileName"]

    r = client.post(f"/delete/{name}", headers=AUTH)
    assert r.status_code == 200
    assert r.json() == {"message": "Delete image successful"}
    assert not os.path.exists(os.path.join(upload_dir, name))


def test_delete_missing_file(client):
    r = client.post("/delete/ghost.jpg", headers=AUTH)
    assert r.status_code == 500
    assert r.json()["message"] == "Failed to delete image"


def test_storage_rejects_names_outside_root(tmp_path):
    storage = LocalStorage(tmp_path / "uploads")
    storage.ensure_dir()
    secret = tmp_path / "secret.txt"
    secret.write_text("keep me")

    for name in ["../secret.txt", "..", ".", "", "sub/../../secret.txt"]:
        with pytest.raises(ValidationError):
            storage.resolve(name)

    with pytest.raises(ValidationError):
        asyncio.run(storage.delete("../secret.txt"))
    assert secret.exists()


def test_storage_delete_missing_raises(tmp_path):
    storage = LocalStorage(tmp_path)
    with pytest.raises(StorageError):
        asyncio.run(storage.delete("missing.jpg"))


def test_public_path(tmp_path):
    storage = LocalStorage(tmp_path, "public/uploads/")
    assert storage.public_path("1-a.jpg") == "/public/uploads/1-a.jpg"


def test_delete_route_rejects_parent_directory(client, upload_dir):
    secret = os.path.join(os.path.dirname(upload_dir), "secret.txt")
    with open(secret, "w") as f:
        f.write("keep me")

    for path in ["/delete/%2E%2E", "/delete/..%2Fsecret.txt", "/delete/%2E%2E%2Fsecret.txt"]:
        r = client.post(path, headers=AUTH)
        assert r.status_code == 400, path
        assert r.json()["message"] == "Invalid file name"

    assert os.path.exists(secret)
    assert os.path.isdir(upload_dir)


def test_delete_route_rejects_nested_name(client, upload_dir):
    os.makedirs(os.path.join(upload_dir, "sub"))
    r = client.post("/delete/sub%2Fx.jpg", headers=AUTH)
    assert r.status_code == 400
