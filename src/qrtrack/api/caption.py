"""Image captioning endpoint."""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile

from qrtrack.errors import ValidationError
from qrtrack.services.captioning import caption_image
from qrtrack.utils.image import detect_mime_type

router = APIRouter()

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB


@router.post("/caption-image")
async def caption(image: Annotated[UploadFile | None, File()] = None):
    """Caption an uploaded image (multipart field ``image``)."""
    if image is None:
        raise ValidationError("No image uploaded.")

    content = await image.read()
    if not content:
        raise ValidationError("No image uploaded.")
    if len(content) > MAX_IMAGE_SIZE:
        raise ValidationError(f"File too large. Max size: {MAX_IMAGE_SIZE // (1024 * 1024)}MB")

    mime_type = detect_mime_type(content)
    if not mime_type.startswith("image/"):
        raise ValidationError("Uploaded file is not a supported image.")

    return {"caption": await caption_image(content, mime_type)}
