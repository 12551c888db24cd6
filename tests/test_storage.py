"""Tests for StableMemory, IdCounter and EntityStore."""

import pickle
import shutil
from pathlib import Path

import pytest

from supply_chain import (
    MAX_RECORD_SIZE,
    Client,
    EntityStore,
    IdCounter,
    StableMemory,
    StorageFault,
)
from supply_chain.storage import CLIENT_REGION


def make_client(client_id: int, name: str = "Acme") -> Client:
    return Client(id=client_id, name=name, phone="5551234", created_at=1)


# ============================================================================
# StableMemory
# ============================================================================


class TestStableMemory:
    """Tests for the region-based byte storage."""

    def test_read_missing_key_returns_none(self, memory: StableMemory) -> None:
        assert memory.read("clients", 7) is None

    def test_write_then_read(self, memory: StableMemory) -> None:
        memory.write("clients", 7, b"payload")
        assert memory.read("clients", 7) == b"payload"

    def test_regions_are_independent(self, memory: StableMemory) -> None:
        memory.write("clients", 1, b"client")
        memory.write("orders", 1, b"order")

        assert memory.read("clients", 1) == b"client"
        assert memory.read("orders", 1) == b"order"
        assert memory.read("suppliers", 1) is None

    def test_delete_returns_previous_value(self, memory: StableMemory) -> None:
        memory.write("orders", 3, b"x")

        assert memory.delete("orders", 3) == b"x"
        assert memory.delete("orders", 3) is None
        assert memory.read("orders", 3) is None

    def test_keys_are_sorted(self, memory: StableMemory) -> None:
        for key in (5, 1, 3):
            memory.write("orders", key, b"x")
        assert memory.keys("orders") == [1, 3, 5]

    def test_record_at_limit_is_accepted(self, memory: StableMemory) -> None:
        memory.write("orders", 1, b"x" * MAX_RECORD_SIZE)
        assert len(memory.read("orders", 1)) == MAX_RECORD_SIZE  # type: ignore[arg-type]

    def test_oversized_record_raises_storage_fault(self, memory: StableMemory) -> None:
        with pytest.raises(StorageFault, match="byte limit"):
            memory.write("orders", 1, b"x" * (MAX_RECORD_SIZE + 1))
        assert memory.read("orders", 1) is None

    def test_custom_record_limit(self) -> None:
        memory = StableMemory(max_record_size=4)
        with pytest.raises(StorageFault):
            memory.write("orders", 1, b"12345")


@pytest.mark.integration
class TestStableMemoryPersistence:
    """Tests for file-backed memory."""

    def test_writes_survive_reload(self, tmp_path: Path) -> None:
        db_file = str(tmp_path / "memory.pkl")
        memory = StableMemory(db_file)
        memory.write("clients", 1, b"one")
        memory.write("clients", 2, b"two")
        memory.delete("clients", 2)

        reloaded = StableMemory(db_file)
        assert reloaded.read("clients", 1) == b"one"
        assert reloaded.read("clients", 2) is None

    def test_no_file_written_without_mutation(self, tmp_path: Path) -> None:
        db_file = tmp_path / "memory.pkl"
        StableMemory(str(db_file))
        assert not db_file.exists()

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        memory = StableMemory(str(tmp_path / "memory.pkl"))
        memory.write("orders", 1, b"x")
        memory.write("orders", 2, b"y")
        assert [p.name for p in tmp_path.iterdir()] == ["memory.pkl"]

    def test_corrupt_file_raises_storage_fault(self, tmp_path: Path) -> None:
        db_file = tmp_path / "memory.pkl"
        db_file.write_bytes(b"not a pickle")
        with pytest.raises(StorageFault, match="cannot load"):
            StableMemory(str(db_file))

    def test_foreign_pickle_raises_storage_fault(self, tmp_path: Path) -> None:
        db_file = tmp_path / "memory.pkl"
        db_file.write_bytes(pickle.dumps(["not", "a", "memory"]))
        with pytest.raises(StorageFault, match="memory image"):
            StableMemory(str(db_file))

    def test_unwritable_location_raises_storage_fault(self, tmp_path: Path) -> None:
        memory = StableMemory(str(tmp_path / "missing" / "memory.pkl"))
        with pytest.raises(StorageFault, match="cannot write"):
            memory.write("orders", 1, b"x")

    def test_failed_write_is_rolled_back(self, tmp_path: Path) -> None:
        memory = StableMemory(str(tmp_path / "missing" / "memory.pkl"))
        with pytest.raises(StorageFault):
            memory.write("orders", 1, b"x")
        assert memory.read("orders", 1) is None
        assert memory.keys("orders") == []

    def test_failed_overwrite_keeps_previous_value(self, tmp_path: Path) -> None:
        db_dir = tmp_path / "db"
        db_dir.mkdir()
        memory = StableMemory(str(db_dir / "memory.pkl"))
        memory.write("orders", 1, b"old")
        shutil.rmtree(db_dir)

        with pytest.raises(StorageFault):
            memory.write("orders", 1, b"new")
        assert memory.read("orders", 1) == b"old"

    def test_failed_delete_keeps_record(self, tmp_path: Path) -> None:
        db_dir = tmp_path / "db"
        db_dir.mkdir()
        memory = StableMemory(str(db_dir / "memory.pkl"))
        memory.write("orders", 1, b"x")
        shutil.rmtree(db_dir)

        with pytest.raises(StorageFault):
            memory.delete("orders", 1)
        assert memory.read("orders", 1) == b"x"


# ============================================================================
# IdCounter
# ============================================================================


class TestIdCounter:
    """Tests for the shared identifier generator."""

    def test_starts_at_zero(self, memory: StableMemory) -> None:
        assert IdCounter(memory).next_id() == 0

    def test_returns_pre_increment_values(self, memory: StableMemory) -> None:
        counter = IdCounter(memory)
        assert [counter.next_id() for _ in range(4)] == [0, 1, 2, 3]

    def test_peek_does_not_consume(self, memory: StableMemory) -> None:
        counter = IdCounter(memory)
        counter.next_id()

        assert counter.peek() == 1
        assert counter.peek() == 1
        assert counter.next_id() == 1

    def test_counters_over_same_memory_share_state(self, memory: StableMemory) -> None:
        first = IdCounter(memory)
        second = IdCounter(memory)

        assert first.next_id() == 0
        assert second.next_id() == 1

    @pytest.mark.integration
    def test_counter_survives_reload(self, tmp_path: Path) -> None:
        db_file = str(tmp_path / "memory.pkl")
        counter = IdCounter(StableMemory(db_file))
        counter.next_id()
        counter.next_id()

        assert IdCounter(StableMemory(db_file)).next_id() == 2


# ============================================================================
# EntityStore
# ============================================================================


class TestEntityStore:
    """Tests for the pydantic entity store."""

    @pytest.fixture
    def store(self, memory: StableMemory) -> EntityStore[Client]:
        return EntityStore(memory, CLIENT_REGION, Client)

    def test_get_missing_returns_none(self, store: EntityStore[Client]) -> None:
        assert store.get(1) is None
        assert not store.contains(1)

    def test_put_then_get_round_trips(self, store: EntityStore[Client]) -> None:
        client = make_client(4)
        store.put(client)

        assert store.get(4) == client
        assert store.contains(4)

    def test_stored_copy_is_independent(self, store: EntityStore[Client]) -> None:
        client = make_client(4)
        store.put(client)
        client.order_ids.append(99)

        assert store.get(4).order_ids == []  # type: ignore[union-attr]

    def test_put_replaces_existing(self, store: EntityStore[Client]) -> None:
        store.put(make_client(4, name="Acme"))
        store.put(make_client(4, name="Acme Ltd"))

        assert store.get(4).name == "Acme Ltd"  # type: ignore[union-attr]
        assert len(store) == 1

    def test_remove(self, store: EntityStore[Client]) -> None:
        store.put(make_client(4))

        assert store.remove(4) == make_client(4)
        assert store.remove(4) is None
        assert len(store) == 0

    def test_values_in_id_order(self, store: EntityStore[Client]) -> None:
        for client_id in (9, 2, 5):
            store.put(make_client(client_id))
        assert [client.id for client in store.values()] == [2, 5, 9]

    def test_oversized_entity_raises_storage_fault(self, store: EntityStore[Client]) -> None:
        with pytest.raises(StorageFault):
            store.put(make_client(1, name="x" * MAX_RECORD_SIZE))
        assert store.get(1) is None
