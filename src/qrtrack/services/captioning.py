"""Image captioning through the Hugging Face inference API."""

import logging

import httpx

from qrtrack.config import settings
from qrtrack.errors import UpstreamError

logger = logging.getLogger(__name__)


async def caption_image(data: bytes, content_type: str) -> str:
    """Return a caption for an image.

    Raises:
        UpstreamError: The API key is missing, the request failed or timed out,
            or the response had no caption.
    """
    if not settings.huggingface_api_key:
        raise UpstreamError("Image captioning is not configured")

    url = f"{settings.caption_api_url}/{settings.caption_model}"
    try:
        async with httpx.AsyncClient(timeout=settings.caption_timeout) as client:
            response = await client.post(
                url,
                headers={
                    "Authorization": f"Bearer {settings.huggingface_api_key}",
                    "Content-Type": content_type,
                },
                content=data,
            )
            response.raise_for_status()
            result = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Captioning API error: {e.response.status_code} - {e.response.text}")
        raise UpstreamError("Image captioning failed", detail=e.response.text) from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Captioning request failed: {e!r}")
        raise UpstreamError("Image captioning failed", detail=str(e)) from e

    if isinstance(result, list) and result and isinstance(result[0], dict):
        caption = result[0].get("generated_text")
    elif isinstance(result, dict):
        caption = result.get("generated_text")
    else:
        caption = None

    if not caption:
        raise UpstreamError("Image captioning returned no caption", detail=str(result)[:200])
    return caption.strip()
