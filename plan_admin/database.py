# plan_admin/database.py
"""Document store access.

The dashboard talks to a document database laid out as nested collections
(``workout_plans/{plan}/weeks/{week}/days/{day}/workouts/{workout}``). Paths are
tuples of segments: an odd-length tuple names a collection, an even-length
tuple names a document.

Writes are atomic per document only. Nothing here wraps several documents in
one transaction; callers that touch many documents must cope with partial
progress.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, AsyncIterator, NamedTuple, Sequence
from uuid import uuid4

from databases import Database
from sqlalchemy import and_, select
from sqlalchemy.engine import make_url
from sqlalchemy.schema import CreateTable

from .core.config import BATCH_DELETE_LIMIT, DATABASE_URL, STORE_BACKEND
from .models import documents

_LOGGER = logging.getLogger(__name__)

Path = tuple[str, ...]


class StoreError(RuntimeError):
    """Any failure reported by the document store."""


class DocumentNotFound(StoreError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Document not found: {'/'.join(path)}")
        self.path = path


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"

    # Must stay a singleton so identity checks survive copies.
    def __copy__(self) -> "_DeleteField":
        return self

    def __deepcopy__(self, memo: dict) -> "_DeleteField":
        return self


# Passed as a value to update() to remove that field from the document.
DELETE_FIELD = _DeleteField()


class Document(NamedTuple):
    id: str
    data: dict[str, Any]


def server_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_document_id() -> str:
    return uuid4().hex[:20]


def _check_collection(path: Sequence[str]) -> Path:
    path = tuple(path)
    if not path or len(path) % 2 != 1:
        raise ValueError(f"Not a collection path: {path!r}")
    return path


def _check_document(path: Sequence[str]) -> Path:
    path = tuple(path)
    if not path or len(path) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return path


def apply_update(data: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for key, value in fields.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class DocumentStore(ABC):
    """Async client interface of the document database."""

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def get(self, path: Path) -> dict[str, Any] | None:
        """Return the document body, or None when it does not exist."""

    @abstractmethod
    async def list_page(
        self, collection: Path, start_after: str | None = None, limit: int | None = None
    ) -> list[Document]:
        """Return documents of a collection ordered by id, after ``start_after``."""

    @abstractmethod
    async def set(self, path: Path, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    async def update(self, path: Path, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document; raises DocumentNotFound."""

    @abstractmethod
    async def delete(self, path: Path) -> None:
        """Delete one document. Sub-collections are left untouched."""

    async def list(self, collection: Path) -> list[Document]:
        return await self.list_page(collection)

    async def iter_documents(self, collection: Path, page_size: int = 200) -> AsyncIterator[Document]:
        """Walk a collection of any size in server-side pages."""
        cursor = None
        while True:
            page = await self.list_page(collection, start_after=cursor, limit=page_size)
            for doc in page:
                yield doc
            if len(page) < page_size:
                return
            cursor = page[-1].id

    async def add(self, collection: Path, data: dict[str, Any], doc_id: str | None = None) -> str:
        collection = _check_collection(collection)
        doc_id = doc_id or new_document_id()
        await self.set(collection + (doc_id,), data)
        return doc_id

    async def batch_delete(self, paths: Sequence[Path], batch_size: int = BATCH_DELETE_LIMIT) -> int:
        paths = list(paths)
        for start in range(0, len(paths), batch_size):
            chunk = paths[start:start + batch_size]
            await self._commit_deletes(chunk)
            _LOGGER.debug("Deleted batch of %s documents", len(chunk))
        return len(paths)

    async def _commit_deletes(self, paths: Sequence[Path]) -> None:
        for path in paths:
            await self.delete(path)


class SqlDocumentStore(DocumentStore):
    """Documents kept as JSON bodies in a single SQL table."""

    def __init__(self, url: str = DATABASE_URL) -> None:
        self.url = url
        self.database = Database(url)

    async def connect(self) -> None:
        await self.database.connect()
        dialect = make_url(self.url).get_dialect()()
        await self.database.execute(query=str(CreateTable(documents, if_not_exists=True).compile(dialect=dialect)))

    async def disconnect(self) -> None:
        await self.database.disconnect()

    @staticmethod
    def _where(path: Path):
        return and_(documents.c.collection == "/".join(path[:-1]), documents.c.doc_id == path[-1])

    async def get(self, path: Path) -> dict[str, Any] | None:
        path = _check_document(path)
        try:
            row = await self.database.fetch_one(select(documents.c.data).where(self._where(path)))
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"get {'/'.join(path)} failed: {err}") from err
        if row is None:
            return None
        return json.loads(row["data"])

    async def list_page(
        self, collection: Path, start_after: str | None = None, limit: int | None = None
    ) -> list[Document]:
        collection = _check_collection(collection)
        query = select(documents.c.doc_id, documents.c.data).where(documents.c.collection == "/".join(collection))
        if start_after is not None:
            query = query.where(documents.c.doc_id > start_after)
        query = query.order_by(documents.c.doc_id)
        if limit is not None:
            query = query.limit(limit)
        try:
            rows = await self.database.fetch_all(query)
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"list {'/'.join(collection)} failed: {err}") from err
        return [Document(row["doc_id"], json.loads(row["data"])) for row in rows]

    async def _write(self, path: Path, data: dict[str, Any]) -> None:
        await self.database.execute(documents.delete().where(self._where(path)))
        await self.database.execute(
            documents.insert().values(collection="/".join(path[:-1]), doc_id=path[-1], data=json.dumps(data))
        )

    async def set(self, path: Path, data: dict[str, Any]) -> None:
        path = _check_document(path)
        try:
            async with self.database.transaction():
                await self._write(path, data)
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"set {'/'.join(path)} failed: {err}") from err

    async def update(self, path: Path, fields: dict[str, Any]) -> None:
        path = _check_document(path)
        try:
            async with self.database.transaction():
                row = await self.database.fetch_one(select(documents.c.data).where(self._where(path)))
                if row is None:
                    raise DocumentNotFound(path)
                await self._write(path, apply_update(json.loads(row["data"]), fields))
        except StoreError:
            raise
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"update {'/'.join(path)} failed: {err}") from err

    async def delete(self, path: Path) -> None:
        path = _check_document(path)
        try:
            await self.database.execute(documents.delete().where(self._where(path)))
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"delete {'/'.join(path)} failed: {err}") from err

    async def _commit_deletes(self, paths: Sequence[Path]) -> None:
        try:
            async with self.database.transaction():
                for path in paths:
                    await self.database.execute(documents.delete().where(self._where(_check_document(path))))
        except Exception as err:  # noqa: BLE001
            raise StoreError(f"batch delete failed: {err}") from err


def create_store(backend: str = STORE_BACKEND, url: str = DATABASE_URL) -> DocumentStore:
    if backend == "memory":
        from .memory_store import MemoryDocumentStore

        return MemoryDocumentStore()
    if backend == "sql":
        return SqlDocumentStore(url)
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")
