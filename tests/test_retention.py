"""
Tests for the retention sweeper.
"""

import asyncio
import os
import time

from app.core.retention import RetentionSweeper


def _write(store, filename, age):
    path = store.path(filename)
    path.write_bytes(b"audio")
    mtime = time.time() - age
    os.utime(path, (mtime, mtime))


def test_sweep_removes_only_expired_artifacts(store):
    """Test that files older than the max age go and younger ones stay."""
    _write(store, "old.wav", age=2 * 3600)
    _write(store, "fresh.wav", age=10 * 60)

    sweeper = RetentionSweeper(store, interval=3600, max_age=3600)
    removed = sweeper.sweep_once()

    assert removed == ["old.wav"]
    assert not store.exists("old.wav")
    assert store.exists("fresh.wav")


def test_sweep_ignores_files_deleted_concurrently(store, monkeypatch):
    """Test that a file removed by a download mid-sweep does not stop the sweep."""
    _write(store, "gone.wav", age=2 * 3600)
    _write(store, "old.wav", age=2 * 3600)
    monkeypatch.setattr(store, "list_artifacts", lambda: ["gone.wav", "old.wav"])
    store.delete("gone.wav")

    removed = RetentionSweeper(store).sweep_once()

    assert removed == ["old.wav"]


def test_sweep_continues_after_per_file_error(store, monkeypatch):
    """Test that one failing delete does not abort the others."""
    _write(store, "locked.wav", age=2 * 3600)
    _write(store, "old.wav", age=2 * 3600)
    monkeypatch.setattr(store, "list_artifacts", lambda: ["locked.wav", "old.wav"])

    original_delete = store.delete

    def flaky_delete(filename):
        if filename == "locked.wav":
            raise PermissionError("Operation not permitted")
        return original_delete(filename)

    monkeypatch.setattr(store, "delete", flaky_delete)

    removed = RetentionSweeper(store).sweep_once()

    assert removed == ["old.wav"]
    assert store.exists("locked.wav")


def test_sweep_survives_listing_error(store, monkeypatch):
    def broken_listing():
        raise OSError("Input/output error")

    monkeypatch.setattr(store, "list_artifacts", broken_listing)

    assert RetentionSweeper(store).sweep_once() == []


def test_sweeper_task_runs_on_interval(store):
    """Test that the background task sweeps after each interval and stops cleanly."""
    _write(store, "old.wav", age=2 * 3600)
    sweeper = RetentionSweeper(store, interval=0.01, max_age=3600)

    async def run():
        sweeper.start()
        for _ in range(100):
            if not store.exists("old.wav"):
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()

    asyncio.run(run())

    assert not store.exists("old.wav")
    assert sweeper._task is None
