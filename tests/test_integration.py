from __future__ import annotations

from pathlib import Path

from lrustore.store import LRUStore


def test_persistent_store_integration(tmp_path: Path) -> None:
    path = tmp_path / "integration_test_cache.txt"

    store = LRUStore.persistent(2, path)
    store.put("A", "val_A")
    store.put("B", "val_B")
    store.put("C", "val_C")  # evicts A
    store.save(path)

    reloaded = LRUStore.persistent(2, path)
    assert reloaded.get("A") is None
    assert reloaded.get("B") == "val_B"
    assert reloaded.get("C") == "val_C"


def test_reload_into_larger_store_matches_original(tmp_path: Path) -> None:
    path = tmp_path / "snap.txt"
    original = LRUStore(3)
    for i in range(5):
        original.put(f"k{i}", f"v{i}")
    original.save(path)

    bigger = LRUStore.persistent(10, path)
    assert len(bigger) == 3
    for key, value in original.items():
        assert bigger.get(key) == value


def test_saved_order_preserves_recency_across_reload(tmp_path: Path) -> None:
    path = tmp_path / "snap.txt"
    store = LRUStore(3)
    store.put("A", "a")
    store.put("B", "b")
    store.put("C", "c")
    store.get("A")
    store.save(path)

    reloaded = LRUStore.persistent(3, path)
    reloaded.put("D", "d")
    assert reloaded.get("B") is None
    assert reloaded.keys() == ["C", "A", "D"]
