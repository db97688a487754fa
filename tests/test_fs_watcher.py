"""Tests for filesystem watch source module."""

import pytest
import time
import threading
from pathlib import Path

from watchdog.events import (
    DirDeletedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from src.dirnotify.exceptions import WatchRegistrationError
from src.dirnotify.fs_watcher import FSEventHandler, WatchSource
from src.dirnotify.models import ChangeOp, RawChange


class Collector:
    """Thread-safe callback target."""

    def __init__(self):
        self.items = []
        self.lock = threading.Lock()

    def __call__(self, item):
        with self.lock:
            self.items.append(item)

    def changes(self, name=None, op=None):
        with self.lock:
            return [
                i for i in self.items
                if isinstance(i, RawChange)
                and (name is None or i.path.name == name)
                and (op is None or i.op & op)
            ]


class TestFSEventHandler:
    """Tests for FSEventHandler class."""

    def test_created(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)

        handler.dispatch(FileCreatedEvent(str(tmp_path / "a.txt")))

        assert len(items) == 1
        assert items[0].path == tmp_path / "a.txt"
        assert items[0].op == ChangeOp.CREATE
        assert items[0].is_directory is False
        assert items[0].watch == tmp_path

    def test_modified(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)
        handler.dispatch(FileModifiedEvent(str(tmp_path / "a.txt")))
        assert items[0].op == ChangeOp.WRITE

    def test_deleted(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)
        handler.dispatch(FileDeletedEvent(str(tmp_path / "a.txt")))
        assert items[0].op == ChangeOp.REMOVE

    def test_deleted_directory(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)
        handler.dispatch(DirDeletedEvent(str(tmp_path / "sub")))
        assert items[0].op == ChangeOp.REMOVE
        assert items[0].is_directory is True

    def test_moved_splits_into_rename_and_create(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)

        handler.dispatch(FileMovedEvent(str(tmp_path / "old.txt"), str(tmp_path / "new.txt")))

        assert [(i.path.name, i.op) for i in items] == [
            ("old.txt", ChangeOp.RENAME),
            ("new.txt", ChangeOp.CREATE),
        ]

    def test_translation_error_forwarded(self, tmp_path):
        items = []
        handler = FSEventHandler(items.append, tmp_path)

        def fail(event):
            raise RuntimeError("broken")

        handler.on_created = fail
        handler.dispatch(FileCreatedEvent(str(tmp_path / "a.txt")))

        assert len(items) == 1
        assert isinstance(items[0], RuntimeError)


class TestWatchSource:
    """Tests for WatchSource class."""

    def test_create_source(self):
        source = WatchSource(Collector())
        assert source.remove(Path(".")) is False
        source.close()

    def test_add(self, tmp_path):
        source = WatchSource(Collector())

        assert source.add(tmp_path) is True

        source.close()

    def test_add_duplicate(self, tmp_path):
        source = WatchSource(Collector())

        source.add(tmp_path)
        assert source.add(tmp_path) is False
        assert source.remove(tmp_path) is True

        source.close()

    def test_add_missing_path(self, tmp_path):
        source = WatchSource(Collector())
        missing = tmp_path / "missing"

        with pytest.raises(WatchRegistrationError) as exc_info:
            source.add(missing)

        assert exc_info.value.path == str(missing)
        assert source.remove(missing) is False
        source.close()

    def test_add_after_failed_attempt(self, tmp_path):
        source = WatchSource(Collector())
        target = tmp_path / "later"

        with pytest.raises(WatchRegistrationError):
            source.add(target)
        target.mkdir()

        assert source.add(target) is True
        source.close()

    def test_remove(self, tmp_path):
        source = WatchSource(Collector())

        source.add(tmp_path)
        assert source.remove(tmp_path) is True
        assert source.remove(tmp_path) is False

        source.close()

    def test_remove_not_watching(self, tmp_path):
        source = WatchSource(Collector())
        assert source.remove(tmp_path) is False
        source.close()

    def test_remove_after_target_deleted(self, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        source = WatchSource(Collector())
        source.add(target)

        target.rmdir()
        time.sleep(0.5)

        assert source.remove(target) is True
        source.close()

    def test_close_reports_end_once(self, tmp_path):
        collector = Collector()
        source = WatchSource(collector)
        source.add(tmp_path)

        source.close()
        source.close()

        assert collector.items.count(None) == 1
        assert source.remove(tmp_path) is False

    def test_detects_file_creation(self, tmp_path):
        collector = Collector()
        source = WatchSource(collector)
        source.add(tmp_path)

        time.sleep(0.2)
        (tmp_path / "test.txt").write_text("hello")
        time.sleep(1.0)

        source.close()
        created = collector.changes("test.txt", ChangeOp.CREATE)
        assert len(created) >= 1
        assert created[0].watch == tmp_path

    def test_detects_file_deletion(self, tmp_path):
        test_file = tmp_path / "test.txt"
        test_file.write_text("to be deleted")
        collector = Collector()
        source = WatchSource(collector)
        source.add(tmp_path)

        time.sleep(0.2)
        test_file.unlink()
        time.sleep(1.0)

        source.close()
        assert len(collector.changes("test.txt", ChangeOp.REMOVE)) >= 1

    def test_non_recursive(self, tmp_path):
        sub = tmp_path / "sub"
        sub.mkdir()
        collector = Collector()
        source = WatchSource(collector)
        source.add(tmp_path)

        time.sleep(0.2)
        (sub / "deep.txt").write_text("x")
        time.sleep(1.0)

        source.close()
        assert collector.changes("deep.txt") == []

    def test_no_items_after_close(self, tmp_path):
        collector = Collector()
        source = WatchSource(collector)
        source.add(tmp_path)
        source.close()

        (tmp_path / "late.txt").write_text("x")
        time.sleep(0.5)

        assert collector.changes("late.txt") == []
