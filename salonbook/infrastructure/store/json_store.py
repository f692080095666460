from __future__ import annotations

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any

from salonbook.application.exceptions import (
    ConcurrentModificationError,
    DocumentStoreError,
    NotFoundError,
)
from salonbook.application.ports.document_store import DocumentStorePort


class JsonDocumentStore(DocumentStorePort):
    """One JSON file per collection, rewritten atomically on every change."""

    def __init__(self, data_dir: str = "./data/collections") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # guards the locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, collection: str) -> threading.Lock:
        """Get or create a lock for a collection."""
        with self._lock_lock:
            if collection not in self._locks:
                self._locks[collection] = threading.Lock()
            return self._locks[collection]

    def _get_file_path(self, collection: str) -> Path:
        return self._data_dir / f"{collection}.json"

    def _load(self, collection: str) -> dict[str, dict[str, Any]]:
        """Load a collection from disk, empty if the file is missing."""
        file_path = self._get_file_path(collection)
        if not file_path.exists():
            return {}
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.error("Collection file unreadable", extra={"reason": collection, "error": str(e)})
            raise DocumentStoreError(f"Collection {collection} is unreadable") from e
        return data.get("documents", {})

    def _save(self, collection: str, documents: dict[str, dict[str, Any]]) -> None:
        """Save a collection atomically."""
        file_path = self._get_file_path(collection)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"collection": collection, "documents": documents}, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise DocumentStoreError(f"Failed to write collection {collection}") from e

    def get_all(self, collection: str) -> list[dict[str, Any]]:
        with self._get_lock(collection):
            return list(self._load(collection).values())

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._get_lock(collection):
            return self._load(collection).get(doc_id)

    def create(self, collection: str, data: dict[str, Any], doc_id: str | None = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        with self._get_lock(collection):
            documents = self._load(collection)
            if doc_id in documents:
                raise ConcurrentModificationError(f"{collection}/{doc_id} already exists")
            documents[doc_id] = {**data, "id": doc_id}
            self._save(collection, documents)
        return doc_id

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        with self._get_lock(collection):
            documents = self._load(collection)
            doc = documents.get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            current = doc.get("version", 1)
            if expected_version is not None and current != expected_version:
                raise ConcurrentModificationError(
                    f"{collection}/{doc_id} is at version {current}, expected {expected_version}"
                )
            doc = {**doc, **fields, "id": doc_id}
            if expected_version is not None:
                doc["version"] = current + 1
            documents[doc_id] = doc
            self._save(collection, documents)
            return doc

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._get_lock(collection):
            documents = self._load(collection)
            if documents.pop(doc_id, None) is None:
                return False
            self._save(collection, documents)
            return True
