"""Collection storage backing the account and owner-scoped repositories.

A collection is an ordered list of JSON objects that is always read and
written as a whole. Repositories hold :meth:`RecordStore.lock` around each
load/mutate/save cycle; the lock is per collection and per process, so
several worker processes sharing one data directory can still overwrite
each other's changes.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from threading import Lock, RLock
from typing import Any, DefaultDict, Iterator, Protocol

from .domain.errors import StorageError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

ACCOUNTS = "accounts"
COMPANIES = "companies"
CLIENTS = "clients"
INVOICES = "invoices"


class RecordStore(Protocol):
    """Load/save contract over named collections of JSON records."""

    def load(self, collection: str) -> list[Record]:
        ...

    def save(self, collection: str, records: list[Record]) -> None:
        ...

    def lock(self, collection: str) -> Any:
        ...


class _CollectionLocks:
    """Lazily created re-entrant lock per collection name."""

    def __init__(self) -> None:
        self._locks: DefaultDict[str, RLock] = defaultdict(RLock)
        self._guard = Lock()

    @contextmanager
    def hold(self, collection: str) -> Iterator[None]:
        with self._guard:
            collection_lock = self._locks[collection]
        with collection_lock:
            yield


class JsonFileRecordStore:
    """One pretty-printed JSON array per collection under ``data_dir``."""

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self._data_dir = Path(data_dir)
        self._locks = _CollectionLocks()

    def path_for(self, collection: str) -> Path:
        return self._data_dir / f"{collection}.json"

    def lock(self, collection: str):
        return self._locks.hold(collection)

    def load(self, collection: str) -> list[Record]:
        """Return the stored records, or an empty list when nothing usable is on disk.

        Missing, blank and unparseable files all read as an empty collection.
        Parse failures are logged rather than raised, so a corrupted file is
        replaced on the next successful save.
        """
        path = self.path_for(collection)
        if not path.exists():
            return []
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("unable to read collection %s from %s", collection, path)
            return []
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("error parsing collection %s at %s", collection, path)
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            logger.error("collection %s at %s is not a JSON array of objects", collection, path)
            return []
        return data

    def save(self, collection: str, records: list[Record]) -> None:
        """Replace the collection file with ``records``.

        The payload is written to a temporary file in the same directory and
        moved over the old file, so readers see either the old or the new
        collection.
        """
        path = self.path_for(collection)
        payload = json.dumps(records, indent=2, ensure_ascii=False)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=self._data_dir)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                    handle.write("\n")
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            logger.exception("unable to write collection %s to %s", collection, path)
            raise StorageError(f"Unable to persist {collection}") from exc
        logger.debug("saved %d records to %s", len(records), path)


class InMemoryRecordStore:
    """Process-local store keeping deep copies of each collection."""

    def __init__(self) -> None:
        self._collections: dict[str, list[Record]] = {}
        self._locks = _CollectionLocks()

    def lock(self, collection: str):
        return self._locks.hold(collection)

    def load(self, collection: str) -> list[Record]:
        return copy.deepcopy(self._collections.get(collection, []))

    def save(self, collection: str, records: list[Record]) -> None:
        self._collections[collection] = copy.deepcopy(records)


def build_record_store(backend: str, data_dir: str) -> RecordStore:
    """Instantiate the configured storage backend."""
    if backend == "memory":
        logger.info("record store using in-memory backend")
        return InMemoryRecordStore()
    if backend != "file":
        raise ValueError(f"unknown storage backend: {backend}")
    logger.info("record store using JSON files under %s", data_dir)
    return JsonFileRecordStore(data_dir)
