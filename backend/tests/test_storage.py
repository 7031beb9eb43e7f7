from __future__ import annotations

import pytest

from files_manager.common.errors import BadRequest
from files_manager.common.storage import BlobStorage, validate_node_name, variant_handle


def test_write_then_read_and_exists(tmp_path):
    storage = BlobStorage(tmp_path / "blobs")
    handle = storage.new_handle()

    assert not storage.exists(handle)
    storage.write(handle, b"hello")

    assert storage.exists(handle)
    assert storage.read(handle) == b"hello"
    assert [path.name for path in (tmp_path / "blobs").iterdir()] == [handle]


def test_variants_live_beside_the_original(tmp_path):
    storage = BlobStorage(tmp_path)
    handle = storage.new_handle()
    storage.write(handle, b"original")
    storage.write(variant_handle(handle, 250), b"small")

    assert variant_handle(handle, 250) == f"{handle}_250"
    assert storage.read(handle) == b"original"
    assert storage.read(f"{handle}_250") == b"small"


def test_handles_cannot_escape_the_root(tmp_path):
    storage = BlobStorage(tmp_path / "blobs")

    for handle in ("../escape", "/etc/passwd", "abc", ""):
        with pytest.raises(BadRequest):
            storage.exists(handle)


@pytest.mark.parametrize("name", ["", "   ", "a/b", "a\\b", ".", ".."])
def test_invalid_node_names(name):
    with pytest.raises(BadRequest):
        validate_node_name(name)


def test_node_names_are_trimmed():
    assert validate_node_name("  cat.png ") == "cat.png"
