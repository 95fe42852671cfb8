"""Proxy query against caller-supplied store credentials."""

import logging
from typing import Any

from fastapi import APIRouter, Body
from pydantic import ValidationError as PydanticValidationError

from qrtrack.api.deps import CustomStoreFactoryDep
from qrtrack.api.utils import require
from qrtrack.database import strip_metadata
from qrtrack.errors import AppError, UpstreamError, ValidationError
from qrtrack.schemas.projects import CustomStoreTarget

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/custom-data")
async def custom_data(open_store: CustomStoreFactoryDep, body: dict[str, Any] = Body(...)):
    """Return every document in the given container.

    A fresh client is built from the validated request for this call only.
    """
    require(
        "Missing required fields.",
        body.get("endpoint"),
        body.get("key"),
        body.get("databaseId"),
        body.get("containerId"),
    )
    try:
        target = CustomStoreTarget.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid store configuration.",
            detail="; ".join(err["msg"] for err in e.errors()),
        ) from e

    try:
        async with open_store(
            target.endpoint, target.key, target.database_id, target.container_id
        ) as store:
            documents = await store.find()
    except AppError as e:
        logger.warning(f"Custom store query failed for {target.endpoint}: {e.message}")
        raise UpstreamError("Could not fetch from provided Cosmos DB.", detail=e.detail) from e

    return {"data": [strip_metadata(doc) for doc in documents]}
