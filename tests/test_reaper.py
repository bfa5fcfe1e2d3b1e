import asyncio
import logging
import os

from media_upload.domains.cleanup.reaper import purge


def _touch(directory, *names):
    for name in names:
        (directory / name).write_bytes(b"x")


def test_purge_deletes_only_unused(tmp_path):
    _touch(tmp_path, "a.jpg", "b.jpg", "c.mp4")
    asyncio.run(purge(tmp_path, {"b.jpg"}))
    assert sorted(os.listdir(tmp_path)) == ["b.jpg"]


def test_purge_with_empty_set_deletes_everything(tmp_path):
    _touch(tmp_path, "a.jpg", "b.jpg")
    asyncio.run(purge(tmp_path, set()))
    assert os.listdir(tmp_path) == []


def test_purge_is_idempotent(tmp_path):
    _touch(tmp_path, "a.jpg", "keep.png")
    asyncio.run(purge(tmp_path, {"keep.png"}))
    asyncio.run(purge(tmp_path, {"keep.png"}))
    assert os.listdir(tmp_path) == ["keep.png"]


def test_missing_directory_is_logged_not_raised(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        asyncio.run(purge(tmp_path / "does-not-exist", set()))
    assert "Error reading directory" in caplog.text


def test_stat_failure_skips_only_that_entry(tmp_path, caplog):
    _touch(tmp_path, "a.jpg")
    os.symlink(tmp_path / "nowhere", tmp_path / "dangling")
    with caplog.at_level(logging.ERROR):
        asyncio.run(purge(tmp_path, set()))
    assert os.listdir(tmp_path) == ["dangling"]
    assert "Error retrieving file stats" in caplog.text


def test_delete_failure_does_not_stop_the_sweep(tmp_path, caplog):
    _touch(tmp_path, "a.jpg", "b.jpg")
    (tmp_path / "subdir").mkdir()
    with caplog.at_level(logging.ERROR):
        asyncio.run(purge(tmp_path, set()))
    assert os.listdir(tmp_path) == ["subdir"]
    assert "Error deleting file" in caplog.text
