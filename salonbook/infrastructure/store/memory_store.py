from __future__ import annotations

import copy
import threading
import uuid
from typing import Any

from salonbook.application.exceptions import ConcurrentModificationError, NotFoundError
from salonbook.application.ports.document_store import DocumentStorePort


class MemoryDocumentStore(DocumentStorePort):
    def __init__(self, seed: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()
        for collection, docs in (seed or {}).items():
            for doc in docs:
                self.create(collection, doc, doc_id=doc.get("id"))

    def get_all(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def create(self, collection: str, data: dict[str, Any], doc_id: str | None = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            if doc_id in docs:
                raise ConcurrentModificationError(f"{collection}/{doc_id} already exists")
            doc = copy.deepcopy(data)
            doc["id"] = doc_id
            docs[doc_id] = doc
        return doc_id

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            current = doc.get("version", 1)
            if expected_version is not None and current != expected_version:
                raise ConcurrentModificationError(
                    f"{collection}/{doc_id} is at version {current}, expected {expected_version}"
                )
            doc.update(copy.deepcopy(fields))
            doc["id"] = doc_id
            if expected_version is not None:
                doc["version"] = current + 1
            return copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None
