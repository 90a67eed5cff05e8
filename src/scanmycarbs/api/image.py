"""Food photo analysis endpoint."""

import base64
import binascii

from fastapi import APIRouter, Depends

from scanmycarbs.api import serializers
from scanmycarbs.api.deps import current_user, get_container
from scanmycarbs.api.schemas import AnalyzeImageRequest
from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.models import UserRecord
from scanmycarbs.errors import ValidationError

router = APIRouter(prefix="/api/image", tags=["image"])


@router.post("/analyze")
async def analyze_image(
    body: AnalyzeImageRequest,
    container: AppContainer = Depends(get_container),
    _user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Recognize foods on a base64 photo and estimate carbs and calories."""
    result = await container.image_service.analyze(decode_image(body.image))
    return serializers.envelope(serializers.image_analysis(result))


def decode_image(raw: str | None) -> bytes:
    """Decode a base64 image, with or without a ``data:`` URL prefix."""
    if not raw:
        raise ValidationError("Image is required")
    _, separator, encoded = raw.partition("base64,")
    if not separator:
        encoded = raw
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image must be base64 encoded") from exc
