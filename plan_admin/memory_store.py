# plan_admin/memory_store.py
from __future__ import annotations

import copy
from typing import Any

from .database import (
    Document,
    DocumentNotFound,
    DocumentStore,
    Path,
    _check_collection,
    _check_document,
    apply_update,
)


class MemoryDocumentStore(DocumentStore):
    """In-process document store.

    Every call is appended to ``ops`` as ``(operation, path)`` so callers can see
    exactly which reads and writes a pass issued.
    """

    def __init__(self) -> None:
        self._collections: dict[Path, dict[str, dict[str, Any]]] = {}
        self.ops: list[tuple[str, Path]] = []

    def writes(self) -> list[tuple[str, Path]]:
        return [op for op in self.ops if op[0] in ("set", "update", "delete")]

    def reset_ops(self) -> None:
        self.ops.clear()

    async def get(self, path: Path) -> dict[str, Any] | None:
        path = _check_document(path)
        self.ops.append(("get", path))
        data = self._collections.get(path[:-1], {}).get(path[-1])
        return copy.deepcopy(data) if data is not None else None

    async def list_page(
        self, collection: Path, start_after: str | None = None, limit: int | None = None
    ) -> list[Document]:
        collection = _check_collection(collection)
        self.ops.append(("list", collection))
        docs = self._collections.get(collection, {})
        ids = sorted(doc_id for doc_id in docs if start_after is None or doc_id > start_after)
        if limit is not None:
            ids = ids[:limit]
        return [Document(doc_id, copy.deepcopy(docs[doc_id])) for doc_id in ids]

    async def set(self, path: Path, data: dict[str, Any]) -> None:
        path = _check_document(path)
        self.ops.append(("set", path))
        self._collections.setdefault(path[:-1], {})[path[-1]] = copy.deepcopy(data)

    async def update(self, path: Path, fields: dict[str, Any]) -> None:
        path = _check_document(path)
        self.ops.append(("update", path))
        docs = self._collections.get(path[:-1], {})
        if path[-1] not in docs:
            raise DocumentNotFound(path)
        docs[path[-1]] = apply_update(docs[path[-1]], copy.deepcopy(fields))

    async def delete(self, path: Path) -> None:
        path = _check_document(path)
        self.ops.append(("delete", path))
        self._collections.get(path[:-1], {}).pop(path[-1], None)

    def dump(self) -> dict[str, dict[str, Any]]:
        """Flat ``{"a/b/c/d": body}`` view of every document, for inspection."""
        out = {}
        for collection, docs in self._collections.items():
            for doc_id, data in docs.items():
                out["/".join(collection + (doc_id,))] = copy.deepcopy(data)
        return out
