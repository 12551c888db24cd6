"""Durable memory regions, the shared id counter and the entity stores.

``StableMemory`` plays the role of the host's durable memory: named regions of
``id -> bytes`` records, optionally persisted to a pickle file after every
write. ``IdCounter`` and ``EntityStore`` are built on top of it, one region
each.
"""

import logging
import pickle
import tempfile
from pathlib import Path
from typing import (
    Dict,
    Generic,
    List,
    Optional,
    Type,
    TypeVar,
)

from pydantic import BaseModel

from .errors import StorageFault


logger = logging.getLogger(__name__)

MAX_RECORD_SIZE = 1024

COUNTER_REGION = "counter"
CLIENT_REGION = "clients"
SUPPLIER_REGION = "suppliers"
ORDER_REGION = "orders"
REGIONS = (COUNTER_REGION, CLIENT_REGION, SUPPLIER_REGION, ORDER_REGION)

EntityT = TypeVar("EntityT", bound=BaseModel)


class StableMemory:
    """Named regions of byte records with optional file persistence.

    With a ``database_file`` the memory is loaded from the file when it exists,
    and the whole state is written back after every mutation using a temporary
    file and an atomic replace. With ``None`` nothing touches the disk.
    """

    def __init__(self, database_file: Optional[str] = None, max_record_size: int = MAX_RECORD_SIZE) -> None:
        self._database_file = database_file
        self.max_record_size = max_record_size

        if database_file is not None and Path(database_file).exists():
            self._load_from_file(database_file)
        else:
            self._regions: Dict[str, Dict[int, bytes]] = {name: {} for name in REGIONS}

    @property
    def database_file(self) -> Optional[str]:
        return self._database_file

    def _load_from_file(self, filepath: str) -> None:
        """Load every region from a pickle file.

        Raises:
            StorageFault: If the file cannot be read or does not hold a memory image
        """
        try:
            with open(filepath, "rb") as f:
                state = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError, ValueError) as e:
            raise StorageFault(f"cannot load memory from {filepath}: {e}") from e

        if not isinstance(state, dict) or "regions" not in state:
            raise StorageFault(f"{filepath} does not contain a memory image")

        self._regions = {name: {} for name in REGIONS}
        self._regions.update(state["regions"])
        logger.debug("Loaded memory from %s", filepath)

    def _save_to_file(self, filepath: str) -> None:
        """Write every region to a pickle file atomically."""
        target = Path(filepath)
        try:
            with tempfile.NamedTemporaryFile(mode="wb", dir=target.parent, delete=False) as tmp:
                pickle.dump({"regions": self._regions}, tmp)
                tmp_path = Path(tmp.name)
            tmp_path.replace(target)
        except (OSError, pickle.PicklingError) as e:
            raise StorageFault(f"cannot write memory to {filepath}: {e}") from e

    def flush(self) -> None:
        """Persist the current state if the memory is file backed."""
        if self._database_file is not None:
            self._save_to_file(self._database_file)

    def _region(self, region: str) -> Dict[int, bytes]:
        return self._regions.setdefault(region, {})

    def read(self, region: str, key: int) -> Optional[bytes]:
        return self._region(region).get(key)

    def write(self, region: str, key: int, value: bytes) -> None:
        """Store a record.

        Raises:
            StorageFault: If the record exceeds ``max_record_size`` or cannot be persisted
        """
        if len(value) > self.max_record_size:
            raise StorageFault(
                f"record {region}/{key} is {len(value)} bytes, " f"over the {self.max_record_size} byte limit"
            )
        records = self._region(region)
        previous = records.get(key)
        records[key] = value
        try:
            self.flush()
        except StorageFault:
            self._restore(region, key, previous)
            raise
        logger.debug("Wrote %s/%s (%d bytes)", region, key, len(value))

    def delete(self, region: str, key: int) -> Optional[bytes]:
        """Remove a record and return it, or None if it was absent.

        Raises:
            StorageFault: If the removal cannot be persisted; the record is kept
        """
        value = self._region(region).pop(key, None)
        if value is not None:
            try:
                self.flush()
            except StorageFault:
                self._restore(region, key, value)
                raise
        return value

    def _restore(self, region: str, key: int, value: Optional[bytes]) -> None:
        """Put back the record a failed flush was meant to replace."""
        if value is None:
            self._region(region).pop(key, None)
        else:
            self._region(region)[key] = value
        logger.warning("Rolled back %s/%s after a failed write", region, key)

    def keys(self, region: str) -> List[int]:
        return sorted(self._region(region))


class IdCounter:
    """Process-wide monotonically increasing id generator shared by all entity kinds."""

    _KEY = 0

    def __init__(self, memory: StableMemory, region: str = COUNTER_REGION) -> None:
        self._memory = memory
        self._region = region

    def peek(self) -> int:
        """Return the next id without consuming it."""
        raw = self._memory.read(self._region, self._KEY)
        return int.from_bytes(raw, "big") if raw is not None else 0

    def next_id(self) -> int:
        """Consume and return the next id.

        Raises:
            StorageFault: If the incremented value cannot be stored
        """
        current = self.peek()
        self._memory.write(self._region, self._KEY, (current + 1).to_bytes(8, "big"))
        return current


class EntityStore(Generic[EntityT]):
    """Persistent map from numeric id to a pydantic entity.

    Entities are stored as UTF-8 JSON under their ``id``. There are no
    secondary indices; callers filter by scanning ``values()``.
    """

    def __init__(self, memory: StableMemory, region: str, model: Type[EntityT]) -> None:
        self._memory = memory
        self._region = region
        self._model = model

    def _decode(self, raw: bytes) -> EntityT:
        return self._model.model_validate_json(raw)

    def get(self, entity_id: int) -> Optional[EntityT]:
        raw = self._memory.read(self._region, entity_id)
        return self._decode(raw) if raw is not None else None

    def contains(self, entity_id: int) -> bool:
        return self._memory.read(self._region, entity_id) is not None

    def put(self, entity: EntityT) -> None:
        self._memory.write(self._region, entity.id, entity.model_dump_json().encode("utf-8"))  # type: ignore[attr-defined]

    def remove(self, entity_id: int) -> Optional[EntityT]:
        raw = self._memory.delete(self._region, entity_id)
        return self._decode(raw) if raw is not None else None

    def values(self) -> List[EntityT]:
        """All entities in ascending id order."""
        return [self._decode(self._memory.read(self._region, key)) for key in self._memory.keys(self._region)]  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._memory.keys(self._region))
