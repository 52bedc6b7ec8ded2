"""Tests for the local providers."""

import threading

import pytest

from qkview_doctor.errors import StorageError
from qkview_doctor.providers.local import LocalEventSource, LocalStorage, MemoryIndexer


class TestLocalEventSource:
    def test_fires_once(self, tmp_path):
        path = tmp_path / "a.tar.gz"
        source = LocalEventSource(path, metadata={"X-Amz-Meta-Uuid": "u1"})
        events = []

        source.subscribe(events.append)
        source.subscribe(events.append)

        assert len(events) == 1
        assert events[0].bucket == "local"
        assert events[0].key == str(path)
        assert events[0].metadata == {"filename": "a.tar.gz", "mode": "local", "X-Amz-Meta-Uuid": "u1"}


class TestLocalStorage:
    def test_copies(self, tmp_path):
        src = tmp_path / "src.bin"
        src.write_bytes(b"payload")
        dest = tmp_path / "dest.bin"

        LocalStorage(src).download_to_file("any", "thing", str(dest))

        assert dest.read_bytes() == b"payload"

    def test_same_path_is_noop(self, tmp_path):
        src = tmp_path / "src.bin"
        src.write_bytes(b"payload")

        LocalStorage(src).download_to_file("local", str(src), str(src))

        assert src.read_bytes() == b"payload"

    def test_missing_source(self, tmp_path):
        with pytest.raises(StorageError, match="failed to copy"):
            LocalStorage(tmp_path / "absent").download_to_file("b", "k", str(tmp_path / "d"))


class TestMemoryIndexer:
    def test_index_and_clear(self, make_record):
        indexer = MemoryIndexer()
        indexer.index(make_record("one"))
        indexer.index_batch([make_record("two"), make_record("three")])

        assert [r.line for r in indexer.get_entries()] == ["one", "two", "three"]

        indexer.clear()
        assert indexer.get_entries() == []

    def test_entries_are_a_copy(self, make_record):
        indexer = MemoryIndexer()
        indexer.index(make_record("one"))

        indexer.get_entries().clear()

        assert len(indexer.get_entries()) == 1

    def test_concurrent_indexing(self, make_record):
        indexer = MemoryIndexer()
        record = make_record("x")

        def worker():
            for _ in range(200):
                indexer.index(record)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(indexer.get_entries()) == 800
