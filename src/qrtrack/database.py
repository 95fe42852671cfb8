"""Document store access.

Records are JSON documents addressed by ``id``, which doubles as the
partition key. Writes derived from a read pass the read's ``_etag`` so a
concurrent modification surfaces as a ``ConflictError`` instead of being
silently overwritten.
"""

import copy
import logging
import re
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from azure.core import MatchConditions
from azure.core.exceptions import AzureError
from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos.aio import CosmosClient

from qrtrack.config import Settings
from qrtrack.errors import ConflictError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def strip_metadata(document: dict[str, Any]) -> dict[str, Any]:
    """Drop store-managed ``_``-prefixed keys from a document."""
    return {key: value for key, value in document.items() if not key.startswith("_")}


def _check_field(name: str) -> str:
    if not _FIELD_RE.match(name):
        raise ValueError(f"Invalid field name: {name!r}")
    return name


class DocumentStore(ABC):
    """Generic query/read/replace/upsert/delete API over one container."""

    @abstractmethod
    async def find(
        self,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Return documents whose fields equal every value in ``where``."""

    async def find_one(self, **where: Any) -> dict[str, Any] | None:
        """Return the first document matching ``where``, or None."""
        results = await self.find(where)
        return results[0] if results else None

    @abstractmethod
    async def read(self, item_id: str) -> dict[str, Any]:
        """Point read by id. Raises NotFoundError."""

    @abstractmethod
    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document. Raises ConflictError if the id exists."""

    @abstractmethod
    async def replace(self, document: dict[str, Any], etag: str | None = None) -> dict[str, Any]:
        """Replace an existing document, optionally only if its etag still matches."""

    @abstractmethod
    async def upsert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Insert or overwrite a document."""

    @abstractmethod
    async def delete(self, item_id: str) -> None:
        """Delete by id. Raises NotFoundError."""

    async def ping(self) -> None:
        """Check connectivity. Raises UpstreamError when unreachable."""

    async def close(self) -> None:
        """Release underlying connections."""


class MemoryDocumentStore(DocumentStore):
    """In-process store used for local development and tests."""

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self._items: dict[str, dict[str, Any]] = {}
        for document in documents or []:
            self._put(document)

    def _put(self, document: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(document)
        stored["_etag"] = uuid.uuid4().hex
        stored["_ts"] = int(datetime.now(UTC).timestamp())
        self._items[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def find(
        self,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        where = where or {}
        for name in where:
            _check_field(name)
        results = [
            copy.deepcopy(item)
            for item in self._items.values()
            if all(item.get(name) == value for name, value in where.items())
        ]
        if order_by:
            _check_field(order_by)
            results.sort(
                key=lambda item: (item.get(order_by) is not None, item.get(order_by) or ""),
                reverse=descending,
            )
        return results

    async def read(self, item_id: str) -> dict[str, Any]:
        if item_id not in self._items:
            raise NotFoundError("Document not found", detail=item_id)
        return copy.deepcopy(self._items[item_id])

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        if document["id"] in self._items:
            raise ConflictError("Document already exists", detail=document["id"])
        return self._put(document)

    async def replace(self, document: dict[str, Any], etag: str | None = None) -> dict[str, Any]:
        current = self._items.get(document["id"])
        if current is None:
            raise NotFoundError("Document not found", detail=document["id"])
        if etag is not None and current["_etag"] != etag:
            raise ConflictError("Document was modified concurrently", detail=document["id"])
        return self._put(strip_metadata(document))

    async def upsert(self, document: dict[str, Any]) -> dict[str, Any]:
        return self._put(strip_metadata(document))

    async def delete(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is None:
            raise NotFoundError("Document not found", detail=item_id)


@asynccontextmanager
async def _translate_cosmos_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except cosmos_exceptions.CosmosResourceNotFoundError as e:
        raise NotFoundError("Document not found", detail=str(e)) from e
    except cosmos_exceptions.CosmosResourceExistsError as e:
        raise ConflictError("Document already exists", detail=str(e)) from e
    except cosmos_exceptions.CosmosAccessConditionFailedError as e:
        raise ConflictError("Document was modified concurrently", detail=str(e)) from e
    except cosmos_exceptions.CosmosHttpResponseError as e:
        logger.error(f"Cosmos {operation} failed: {e.status_code} {e.message}")
        raise UpstreamError("Document store request failed", detail=str(e)) from e
    except AzureError as e:
        logger.error(f"Cosmos {operation} failed: {e!r}")
        raise UpstreamError("Document store unreachable", detail=str(e)) from e


class CosmosDocumentStore(DocumentStore):
    """Azure Cosmos DB container accessed through the async SDK."""

    def __init__(self, endpoint: str, key: str, database_id: str, container_id: str) -> None:
        self.database_id = database_id
        self.container_id = container_id
        self._client = CosmosClient(endpoint, credential=key)
        self._container = self._client.get_database_client(database_id).get_container_client(
            container_id
        )

    async def find(
        self,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        where = where or {}
        clauses = [f"c.{_check_field(name)} = @{name}" for name in where]
        query = "SELECT * FROM c"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        if order_by:
            query += f" ORDER BY c.{_check_field(order_by)} {'DESC' if descending else 'ASC'}"
        parameters = [{"name": f"@{name}", "value": value} for name, value in where.items()]

        async with _translate_cosmos_errors("query"):
            items = self._container.query_items(query=query, parameters=parameters or None)
            return [item async for item in items]

    async def read(self, item_id: str) -> dict[str, Any]:
        async with _translate_cosmos_errors("read"):
            return await self._container.read_item(item=item_id, partition_key=item_id)

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        async with _translate_cosmos_errors("create"):
            return await self._container.create_item(body=document)

    async def replace(self, document: dict[str, Any], etag: str | None = None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if etag is not None:
            kwargs = {"etag": etag, "match_condition": MatchConditions.IfNotModified}
        async with _translate_cosmos_errors("replace"):
            return await self._container.replace_item(
                item=document["id"], body=strip_metadata(document), **kwargs
            )

    async def upsert(self, document: dict[str, Any]) -> dict[str, Any]:
        async with _translate_cosmos_errors("upsert"):
            return await self._container.upsert_item(body=strip_metadata(document))

    async def delete(self, item_id: str) -> None:
        async with _translate_cosmos_errors("delete"):
            await self._container.delete_item(item=item_id, partition_key=item_id)

    async def ping(self) -> None:
        async with _translate_cosmos_errors("ping"):
            await self._container.read()

    async def close(self) -> None:
        await self._client.close()


def create_stores(config: Settings) -> tuple[DocumentStore, DocumentStore]:
    """Build the (accounts, projects) stores for the configured backend."""
    if config.store_backend == "memory":
        logger.warning("Using in-memory document store; data will not persist")
        return MemoryDocumentStore(), MemoryDocumentStore()

    accounts = CosmosDocumentStore(
        endpoint=config.cosmos_endpoint,
        key=config.cosmos_key,
        database_id=config.cosmos_database,
        container_id=config.cosmos_container,
    )
    projects = CosmosDocumentStore(
        endpoint=config.qr_cosmos_endpoint or config.cosmos_endpoint,
        key=config.qr_cosmos_key or config.cosmos_key,
        database_id=config.qr_cosmos_database,
        container_id=config.qr_cosmos_container,
    )
    return accounts, projects


@asynccontextmanager
async def open_custom_store(
    endpoint: str, key: str, database_id: str, container_id: str
) -> AsyncIterator[DocumentStore]:
    """Open a one-off store for caller-supplied credentials, closing it afterwards."""
    try:
        store = CosmosDocumentStore(endpoint, key, database_id, container_id)
    except (ValueError, TypeError, AzureError) as e:
        raise UpstreamError("Invalid Cosmos DB configuration.", detail=str(e)) from e
    try:
        yield store
    finally:
        await store.close()


CustomStoreFactory = Callable[[str, str, str, str], Any]
