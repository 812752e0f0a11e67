from __future__ import annotations

import copy

import pytest

from plan_admin.database import DELETE_FIELD, DocumentNotFound, SqlDocumentStore, create_store
from plan_admin.memory_store import MemoryDocumentStore

from conftest import run


def test_delete_field_survives_copies():
    assert copy.deepcopy({"x": DELETE_FIELD})["x"] is DELETE_FIELD
    assert copy.copy(DELETE_FIELD) is DELETE_FIELD


def test_paths_must_have_the_right_shape(store):
    with pytest.raises(ValueError):
        run(store.get(("plans",)))
    with pytest.raises(ValueError):
        run(store.list(("plans", "p1")))


def test_create_store_backends():
    assert isinstance(create_store("memory"), MemoryDocumentStore)
    with pytest.raises(ValueError):
        create_store("mongo")


async def _exercise(store):
    await store.connect()
    try:
        collection = ("workout_plans", "p1", "weeks")
        for i in range(5):
            await store.add(collection, {"weekNumber": i + 1, "note": "x"}, doc_id=f"w{i}")
        await store.update(collection + ("w0",), {"weekNumber": 10, "note": DELETE_FIELD})

        first = await store.get(collection + ("w0",))
        paged = [doc.id async for doc in store.iter_documents(collection, page_size=2)]
        missing = None
        try:
            await store.update(collection + ("nope",), {"a": 1})
        except DocumentNotFound as err:
            missing = err
        deleted = await store.batch_delete([collection + (f"w{i}",) for i in range(4)], batch_size=3)
        remaining = [doc.id for doc in await store.list(collection)]
        generated = await store.add(("global_workouts",), {"name": "Row"})
        return first, paged, missing, deleted, remaining, generated
    finally:
        await store.disconnect()


@pytest.mark.parametrize("backend", ["memory", "sql"])
def test_document_store_contract(backend, tmp_path):
    if backend == "sql":
        store = SqlDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    else:
        store = MemoryDocumentStore()

    first, paged, missing, deleted, remaining, generated = run(_exercise(store))

    assert first == {"weekNumber": 10}
    assert paged == ["w0", "w1", "w2", "w3", "w4"]
    assert isinstance(missing, DocumentNotFound)
    assert deleted == 4
    assert remaining == ["w4"]
    assert generated


def test_memory_store_records_operations(store):
    run(store.set(("users", "a@b.c"), {"isAdmin": True}))
    run(store.get(("users", "a@b.c")))
    assert store.ops == [("set", ("users", "a@b.c")), ("get", ("users", "a@b.c"))]
    assert store.writes() == [("set", ("users", "a@b.c"))]
    assert store.dump() == {"users/a@b.c": {"isAdmin": True}}
