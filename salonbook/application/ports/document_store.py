from abc import ABC, abstractmethod
from typing import Any


class DocumentStorePort(ABC):
    @abstractmethod
    def get_all(self, collection: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def create(self, collection: str, data: dict[str, Any], doc_id: str | None = None) -> str:
        """Create a document. Returns its id; generates one when `doc_id` is None."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """
        Merge `fields` into an existing document and return the stored result.

        When `expected_version` is given the document's `version` field must
        match it, otherwise ConcurrentModificationError is raised; a successful
        versioned update increments `version`.
        Raises NotFoundError if the document does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns True if it existed."""
        raise NotImplementedError
