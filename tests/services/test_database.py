"""In-memory document store tests."""

import pytest

from qrtrack.database import MemoryDocumentStore, create_stores, strip_metadata
from qrtrack.errors import ConflictError, NotFoundError


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.mark.asyncio
async def test_create_and_read(store: MemoryDocumentStore):
    created = await store.create({"id": "1", "name": "Menu"})
    assert created["_etag"]
    read = await store.read("1")
    assert read["name"] == "Menu"
    assert read["_etag"] == created["_etag"]


@pytest.mark.asyncio
async def test_create_duplicate(store: MemoryDocumentStore):
    await store.create({"id": "1"})
    with pytest.raises(ConflictError):
        await store.create({"id": "1"})


@pytest.mark.asyncio
async def test_read_missing(store: MemoryDocumentStore):
    with pytest.raises(NotFoundError):
        await store.read("missing")


@pytest.mark.asyncio
async def test_reads_are_copies(store: MemoryDocumentStore):
    await store.create({"id": "1", "tags": ["a"]})
    read = await store.read("1")
    read["tags"].append("b")
    assert (await store.read("1"))["tags"] == ["a"]


@pytest.mark.asyncio
async def test_replace_with_current_etag(store: MemoryDocumentStore):
    created = await store.create({"id": "1", "count": 1})
    replaced = await store.replace({**created, "count": 2}, etag=created["_etag"])
    assert replaced["count"] == 2
    assert replaced["_etag"] != created["_etag"]


@pytest.mark.asyncio
async def test_replace_with_stale_etag_conflicts(store: MemoryDocumentStore):
    created = await store.create({"id": "1", "count": 1})
    await store.replace({"id": "1", "count": 2}, etag=created["_etag"])
    with pytest.raises(ConflictError):
        await store.replace({"id": "1", "count": 3}, etag=created["_etag"])
    assert (await store.read("1"))["count"] == 2


@pytest.mark.asyncio
async def test_replace_missing(store: MemoryDocumentStore):
    with pytest.raises(NotFoundError):
        await store.replace({"id": "missing"})


@pytest.mark.asyncio
async def test_find_filters_and_orders(store: MemoryDocumentStore):
    await store.create({"id": "1", "ownerId": "a", "createdAt": "2024-01-01"})
    await store.create({"id": "2", "ownerId": "b", "createdAt": "2024-01-02"})
    await store.create({"id": "3", "ownerId": "a", "createdAt": "2024-01-03"})

    results = await store.find({"ownerId": "a"}, order_by="createdAt", descending=True)
    assert [doc["id"] for doc in results] == ["3", "1"]
    assert await store.find_one(ownerId="b") is not None
    assert await store.find_one(ownerId="c") is None


@pytest.mark.asyncio
async def test_find_rejects_unsafe_field_names(store: MemoryDocumentStore):
    with pytest.raises(ValueError):
        await store.find({"x = 1 OR 1": 1})


@pytest.mark.asyncio
async def test_delete(store: MemoryDocumentStore):
    await store.create({"id": "1"})
    await store.delete("1")
    with pytest.raises(NotFoundError):
        await store.delete("1")


@pytest.mark.asyncio
async def test_upsert(store: MemoryDocumentStore):
    await store.upsert({"id": "1", "v": 1})
    await store.upsert({"id": "1", "v": 2, "_etag": "stale"})
    assert (await store.read("1"))["v"] == 2


def test_strip_metadata():
    doc = {"id": "1", "_rid": "x", "_etag": "y", "_ts": 1, "name": "n"}
    assert strip_metadata(doc) == {"id": "1", "name": "n"}


def test_create_stores_memory_backend():
    from qrtrack.config import settings

    accounts, projects = create_stores(settings)
    assert isinstance(accounts, MemoryDocumentStore)
    assert isinstance(projects, MemoryDocumentStore)
    assert accounts is not projects
