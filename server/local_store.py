"""
Local Document Store

A Firestore-shaped document store kept in process memory and, optionally,
mirrored to a JSON file. It backs the API when Firebase is not configured,
holds orders written while Firestore is unreachable, and is the store used
by the test suite.

Only the subset of the Firestore client API that the services use is
implemented: collections, documents, simple queries, and write batches.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import copy
import json
import logging
import os
import threading
import uuid

from google.api_core.exceptions import NotFound

logger = logging.getLogger(__name__)

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

_MISSING = object()


def _encode(value: Any) -> Any:
    """Make a document JSON-serializable, tagging datetimes"""
    if isinstance(value, datetime):
        return {"__datetime__": value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {"__datetime__"}:
            return datetime.fromisoformat(value["__datetime__"])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _get_field(data: Dict[str, Any], field_path: str) -> Any:
    current = data
    for part in field_path.split('.'):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _set_field(data: Dict[str, Any], field_path: str, value: Any):
    parts = field_path.split('.')
    current = data
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def _merge(target: Dict[str, Any], updates: Dict[str, Any]):
    """Merge updates into target the way set(merge=True) does: maps merge, other values replace"""
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


def _sort_key(value: Any) -> tuple:
    # nulls sort first
    return (value is not None, value)


def _matches(value: Any, op: str, expected: Any) -> bool:
    if value is _MISSING:
        return False
    try:
        if op == '==':
            return value == expected
        if op == '!=':
            return value != expected
        if op == '<':
            return value < expected
        if op == '<=':
            return value <= expected
        if op == '>':
            return value > expected
        if op == '>=':
            return value >= expected
        if op == 'in':
            return value in expected
        if op == 'not-in':
            return value not in expected
        if op == 'array_contains':
            return isinstance(value, list) and expected in value
        if op == 'array_contains_any':
            return isinstance(value, list) and any(item in value for item in expected)
    except TypeError:
        return False
    raise ValueError(f"Unsupported query operator: {op}")


class LocalDocumentSnapshot:
    """Read-only view of a document at the time it was fetched"""

    def __init__(self, reference: 'LocalDocumentReference', data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field_path: str) -> Any:
        if self._data is None:
            return None
        value = _get_field(self._data, field_path)
        return None if value is _MISSING else copy.deepcopy(value)


class LocalDocumentReference:

    def __init__(self, store: 'LocalFirestore', collection_name: str, doc_id: str):
        self._store = store
        self._collection = collection_name
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self.id}"

    def get(self) -> LocalDocumentSnapshot:
        with self._store._lock:
            data = self._store._collections.get(self._collection, {}).get(self.id)
            return LocalDocumentSnapshot(self, copy.deepcopy(data))

    def set(self, document_data: Dict[str, Any], merge: bool = False):
        with self._store._lock:
            docs = self._store._collections.setdefault(self._collection, {})
            if merge and self.id in docs:
                _merge(docs[self.id], document_data)
            else:
                docs[self.id] = copy.deepcopy(document_data)
            self._store._persist()

    def update(self, field_updates: Dict[str, Any]):
        with self._store._lock:
            docs = self._store._collections.get(self._collection, {})
            if self.id not in docs:
                raise NotFound(f"No document to update: {self.path}")
            for field_path, value in field_updates.items():
                _set_field(docs[self.id], field_path, copy.deepcopy(value))
            self._store._persist()

    def delete(self):
        with self._store._lock:
            self._store._collections.get(self._collection, {}).pop(self.id, None)
            self._store._persist()


class LocalQuery:

    def __init__(self, store: 'LocalFirestore', collection_name: str,
                 filters: List[tuple] = None, orders: List[tuple] = None, limit_count: int = None):
        self._store = store
        self._collection = collection_name
        self._filters = filters or []
        self._orders = orders or []
        self._limit = limit_count

    def _copy(self, **overrides) -> 'LocalQuery':
        params = {
            'filters': list(self._filters),
            'orders': list(self._orders),
            'limit_count': self._limit,
        }
        params.update(overrides)
        return LocalQuery(self._store, self._collection, **params)

    def where(self, field_path: str, op_string: str, value: Any) -> 'LocalQuery':
        return self._copy(filters=self._filters + [(field_path, op_string, value)])

    def order_by(self, field_path: str, direction: str = ASCENDING) -> 'LocalQuery':
        return self._copy(orders=self._orders + [(field_path, direction)])

    def limit(self, count: int) -> 'LocalQuery':
        return self._copy(limit_count=count)

    def stream(self):
        with self._store._lock:
            docs = dict(self._store._collections.get(self._collection, {}))
            results = []
            for doc_id, data in docs.items():
                if all(_matches(_get_field(data, f), op, v) for f, op, v in self._filters):
                    results.append((doc_id, data))

            # Documents lacking an order_by field are excluded, as in Firestore
            for field_path, _ in self._orders:
                results = [r for r in results if _get_field(r[1], field_path) is not _MISSING]
            for field_path, direction in reversed(self._orders):
                results.sort(
                    key=lambda r: _sort_key(_get_field(r[1], field_path)),
                    reverse=direction == DESCENDING
                )

            if self._limit is not None:
                results = results[:self._limit]

            snapshots = [
                LocalDocumentSnapshot(
                    LocalDocumentReference(self._store, self._collection, doc_id),
                    copy.deepcopy(data)
                )
                for doc_id, data in results
            ]
        return iter(snapshots)

    def get(self) -> List[LocalDocumentSnapshot]:
        return list(self.stream())


class LocalCollectionReference(LocalQuery):

    def __init__(self, store: 'LocalFirestore', collection_name: str):
        super().__init__(store, collection_name)
        self.id = collection_name

    def document(self, document_id: str = None) -> LocalDocumentReference:
        return LocalDocumentReference(self._store, self._collection, document_id or uuid.uuid4().hex[:20])

    def add(self, document_data: Dict[str, Any], document_id: str = None):
        doc_ref = self.document(document_id)
        doc_ref.set(document_data)
        return datetime.now(), doc_ref


class LocalWriteBatch:

    def __init__(self):
        self._operations = []

    def set(self, reference: LocalDocumentReference, document_data: Dict[str, Any], merge: bool = False):
        self._operations.append(lambda: reference.set(document_data, merge=merge))

    def update(self, reference: LocalDocumentReference, field_updates: Dict[str, Any]):
        self._operations.append(lambda: reference.update(field_updates))

    def delete(self, reference: LocalDocumentReference):
        self._operations.append(reference.delete)

    def commit(self):
        for operation in self._operations:
            operation()
        self._operations = []


class LocalFirestore:
    """In-process document store with an optional JSON file behind it"""

    def __init__(self, path: str = None):
        self._path = path
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._load()

    def _load(self):
        if not self._path or not os.path.exists(self._path):
            return
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                self._collections = _decode(json.load(f))
            logger.info(f"Loaded local store from {self._path}")
        except (OSError, ValueError) as e:
            logger.error(f"Could not read local store {self._path}: {e}")
            self._collections = {}

    def _persist(self):
        if not self._path:
            return
        tmp_path = f"{self._path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(_encode(self._collections), f, indent=2)
        os.replace(tmp_path, self._path)

    def collection(self, collection_name: str) -> LocalCollectionReference:
        return LocalCollectionReference(self, collection_name)

    def batch(self) -> LocalWriteBatch:
        return LocalWriteBatch()

    def collection_names(self) -> List[str]:
        with self._lock:
            return sorted(name for name, docs in self._collections.items() if docs)

    def reset(self):
        with self._lock:
            self._collections = {}
            self._persist()
