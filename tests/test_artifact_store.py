"""
Tests for the artifact store module.
"""

import pytest

from app.core.artifact_store import ArtifactStore
from app.exceptions import ArtifactNotFound, InvalidArtifactName


def test_creates_scratch_directory(tmp_path):
    root = tmp_path / "nested" / "temp"
    ArtifactStore(root)
    assert root.is_dir()


def test_size_and_read_back(store):
    """Test size lookup and streamed read-back of an artifact."""
    store.path("clip.wav").write_bytes(b"RIFF0000WAVE")

    assert store.exists("clip.wav")
    assert store.size("clip.wav") == 12
    with store.open_read("clip.wav") as f:
        assert f.read() == b"RIFF0000WAVE"


def test_missing_artifact(store):
    assert not store.exists("missing.wav")
    with pytest.raises(ArtifactNotFound):
        store.size("missing.wav")
    with pytest.raises(ArtifactNotFound):
        store.modified_time("missing.wav")
    with pytest.raises(ArtifactNotFound):
        store.open_read("missing.wav")


@pytest.mark.parametrize("filename", [
    "",
    ".",
    "..",
    "../secret.wav",
    "..\\secret.wav",
    "sub/clip.wav",
    "/etc/passwd",
    "clip\x00.wav",
])
def test_rejects_path_traversal(store, filename):
    """Test that names escaping the scratch directory are refused."""
    with pytest.raises(InvalidArtifactName):
        store.path(filename)
    assert not store.exists(filename)


def test_invalid_name_reads_as_not_found(store):
    with pytest.raises(ArtifactNotFound):
        store.open_read("../clip.wav")


def test_delete_is_idempotent(store):
    """Test that a second delete of the same artifact is a no-op."""
    store.path("clip.wav").write_bytes(b"data")

    assert store.delete("clip.wav") is True
    assert store.delete("clip.wav") is False
    assert not store.exists("clip.wav")


def test_list_artifacts_skips_directories(store):
    store.path("a.wav").write_bytes(b"a")
    store.path("b.wav").write_bytes(b"b")
    (store.root / "subdir").mkdir()

    assert sorted(store.list_artifacts()) == ["a.wav", "b.wav"]
