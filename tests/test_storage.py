import pytest

from errors import AlreadyExists, NotFound


def test_original_roundtrip(images):
    images.write_original(1, b"original bytes")
    assert images.read_original(1) == b"original bytes"
    assert images.original_path(1).name == "1.jpg"


def test_original_cannot_be_overwritten(images):
    images.write_original(7, b"first")
    with pytest.raises(AlreadyExists):
        images.write_original(7, b"second")
    assert images.read_original(7) == b"first"


def test_missing_blobs_raise_not_found(images):
    with pytest.raises(NotFound):
        images.read_original(42)
    with pytest.raises(NotFound):
        images.read_thumbnail(42)
    with pytest.raises(NotFound):
        images.thumbnail_path(42)


def test_thumbnail_may_be_rewritten(images):
    assert not images.thumbnail_exists(3)
    images.write_thumbnail(3, b"v1")
    images.write_thumbnail(3, b"v2")
    assert images.thumbnail_exists(3)
    assert images.read_thumbnail(3) == b"v2"
    assert images.thumbnail_path(3).name == "3_thumb.jpg"
    assert not list(images.root.glob("*.tmp"))
