import sys
from pathlib import Path

# Add the project root (one level up from 'test') to sys.path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import itertools
import json
import os
import threading
import time

from SnapDict.core.config import STORAGE_KEY_HISTORY
from SnapDict.services.storage.history_store import HistoryStore
from SnapDict.services.storage.kv_storage import JsonFileStorage, MemoryStorage


def _store(storage=None, **kw):
    ticks = itertools.count(1_700_000_000_000)
    return HistoryStore(storage if storage is not None else MemoryStorage(), clock=lambda: next(ticks), **kw)


def test_empty_store_lists_nothing():
    assert _store().list() == []


def test_add_capitalizes_and_prepends():
    store = _store()
    store.add("apple")
    items = store.add("  banana ")
    assert [i.text for i in items] == ["Banana", "Apple"]
    assert store.list() == items


def test_blank_add_is_noop():
    store = _store()
    store.add("apple")
    assert [i.text for i in store.add("   ")] == ["Apple"]


def test_case_insensitive_dedup_supersedes():
    store = _store()
    store.add("cat")
    store.add("dog")
    items = store.add("Cat")
    assert [i.text for i in items] == ["Cat", "Dog"]
    assert len(items) == 2


def test_capacity_keeps_most_recent_fifty():
    store = _store()
    for n in range(60):
        items = store.add(f"word{n}")
    assert len(items) == 50
    assert items[0].text == "Word59"
    assert items[-1].text == "Word10"


def test_batch_add_keeps_reading_order_on_top():
    store = _store()
    store.add("older")
    items = store.add_many(["A", "B", "C"])
    assert [i.text for i in items] == ["A", "B", "C", "Older"]


def test_ids_are_unique_under_rapid_calls():
    # frozen clock: ids must still differ
    store = HistoryStore(MemoryStorage(), clock=lambda: 42)
    items = store.add_many([f"w{n}" for n in range(30)])
    assert len({i.id for i in items}) == 30


def test_update_keeps_identity_and_timestamp():
    store = _store()
    store.add("colour")
    before = store.list()[0]
    after = store.update(before.id, "  color ")[0]
    assert after.id == before.id
    assert after.timestamp == before.timestamp
    assert after.text == "color"


def test_update_same_text_is_idempotent():
    store = _store()
    store.add("one")
    store.add("two")
    before = store.list()
    assert store.update(before[1].id, before[1].text) == before


def test_update_does_not_deduplicate():
    store = _store()
    store.add("cat")
    dog = store.add("dog")[0]
    items = store.update(dog.id, "Cat")
    assert [i.text for i in items] == ["Cat", "Cat"]


def test_update_noops():
    store = _store()
    store.add("cat")
    before = store.list()
    assert store.update(before[0].id, "   ") == before
    assert store.update("missing", "dog") == before


def test_remove():
    store = _store()
    store.add("cat")
    dog = store.add("dog")[0]
    assert [i.text for i in store.remove(dog.id)] == ["Cat"]
    assert [i.text for i in store.remove("missing")] == ["Cat"]


def test_corrupt_blob_reads_as_empty():
    for blob in ("{not json", json.dumps({"a": 1}), json.dumps([{"id": 1}])):
        storage = MemoryStorage({STORAGE_KEY_HISTORY: blob})
        assert _store(storage).list() == []


def test_add_recovers_from_corrupt_blob():
    storage = MemoryStorage({STORAGE_KEY_HISTORY: "garbage"})
    items = _store(storage).add("fresh")
    assert [i.text for i in items] == ["Fresh"]
    assert json.loads(storage.get_item(STORAGE_KEY_HISTORY))[0]["text"] == "Fresh"


def test_concurrent_adds_serialize():
    store = HistoryStore(MemoryStorage())
    words = [f"w{n}" for n in range(40)]
    threads = [threading.Thread(target=store.add, args=(w,)) for w in words]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.list()) == 40


def test_json_file_storage_persists_between_instances(tmp_path):
    path = tmp_path / "data" / "storage.json"
    _store(JsonFileStorage(path)).add("persist")
    reopened = _store(JsonFileStorage(path))
    assert [i.text for i in reopened.list()] == ["Persist"]
    assert not path.with_suffix(".json.lock").exists()


def test_json_file_storage_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("][", encoding="utf8")
    assert _store(JsonFileStorage(path)).list() == []


class FailingStorage(MemoryStorage):
    def set_item(self, key, value):
        raise OSError("disk full")


def test_failed_write_keeps_previous_list():
    storage = FailingStorage({STORAGE_KEY_HISTORY: json.dumps([{"id": "1-a", "text": "Apple", "timestamp": 1}])})
    store = _store(storage)
    assert [i.text for i in store.add("banana")] == ["Apple"]
    assert [i.text for i in store.update("1-a", "Pear")] == ["Apple"]
    assert store.remove("1-a") == store.list()


def test_held_lock_does_not_raise(tmp_path):
    path = tmp_path / "storage.json"
    store = _store(JsonFileStorage(path, lock_timeout=0.1))
    before = store.add("apple")
    lock = path.with_suffix(".json.lock")
    lock.mkdir()
    assert store.add("banana") == before
    assert [i.text for i in store.list()] == ["Apple"]
    assert lock.exists()


def test_stale_lock_is_broken(tmp_path):
    path = tmp_path / "storage.json"
    lock = path.with_suffix(".json.lock")
    lock.mkdir()
    old = time.time() - 3600
    os.utime(lock, (old, old))
    items = _store(JsonFileStorage(path, lock_timeout=0.5)).add("apple")
    assert [i.text for i in items] == ["Apple"]
    assert not lock.exists()
