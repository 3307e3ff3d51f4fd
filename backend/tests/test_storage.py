import pytest

from utils import storage
from utils.exceptions import ValidationError


@pytest.mark.parametrize("name", ["../secret.txt", "a/b.jpg", "..", "", "."])
def test_resolve_refuses_path_components(name):
    with pytest.raises(ValidationError):
        storage.resolve(name)


def test_delete_file_is_best_effort(tmp_path):
    assert storage.delete_file("does-not-exist.jpg") is False
    assert storage.delete_file("../escape.jpg") is False

    target = storage.resolve("present.jpg")
    target.write_bytes(b"x")
    assert storage.delete_file("present.jpg") is True
    assert not target.exists()


def test_delete_files_continues_after_failures():
    kept = storage.resolve("kept.jpg")
    gone = storage.resolve("gone.jpg")
    gone.write_bytes(b"x")
    kept.write_bytes(b"x")

    storage.delete_files(["missing.jpg", "../nope.jpg", "gone.jpg"])

    assert not gone.exists()
    assert kept.exists()
