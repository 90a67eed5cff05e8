"""Image recognition bridge from classifier concepts to nutrition totals."""

import asyncio
import base64
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from scanmycarbs.domain.nutrition import CanonicalFood
from scanmycarbs.domain.vision import Concept, DetectedFood, ImageAnalysis
from scanmycarbs.errors import ImageRecognitionError, ValidationError
from scanmycarbs.services.nutrition import FoodResolver

MAX_CONCEPTS = 5
MIN_CONFIDENCE = 0.5
DEFAULT_PORTION_G = 100.0

_logger = logging.getLogger(__name__)


class ConceptClassifier(Protocol):
    """Interface for an external food image classifier."""

    async def classify(self, image_bytes: bytes) -> list[Concept]:
        """Return ranked concepts for an image; raise on failure."""


@dataclass
class ImageRecognitionService:
    """Maps classifier concepts to resolver lookups and sums carbs/calories."""

    classifier: ConceptClassifier
    resolver: FoodResolver

    async def analyze(self, image_bytes: bytes) -> ImageAnalysis:
        """Analyze a food photo.

        A classifier failure fails the whole call; a concept that cannot be
        resolved is dropped from the result.
        """
        if not image_bytes:
            raise ValidationError("Image is required")
        try:
            concepts = await self.classifier.classify(image_bytes)
        except ImageRecognitionError:
            raise
        except Exception as exc:
            _logger.exception("Classifier raised an unexpected error")
            raise ImageRecognitionError() from exc

        kept = select_concepts(concepts)
        resolved = await asyncio.gather(
            *(self._resolve(concept.name) for concept in kept)
        )

        foods: list[DetectedFood] = []
        total_carbs = 0.0
        total_calories = 0.0
        for food in resolved:
            if food is None:
                continue
            factor = DEFAULT_PORTION_G / 100
            carbs = food.macros.carbs_g * factor
            calories = food.macros.calories * factor
            foods.append(
                DetectedFood(
                    name=food.name,
                    quantity_g=DEFAULT_PORTION_G,
                    carbs_g=round_half_up(carbs, 1),
                    calories=int(round_half_up(calories)),
                )
            )
            total_carbs += carbs
            total_calories += calories

        return ImageAnalysis(
            foods=foods,
            total_carbs_g=round_half_up(total_carbs, 1),
            total_calories=int(round_half_up(total_calories)),
        )

    async def _resolve(self, label: str) -> CanonicalFood | None:
        try:
            results = await self.resolver.search(label, limit=1)
        except Exception:
            _logger.warning("Could not resolve concept %r", label, exc_info=True)
            return None
        return results[0] if results else None


def select_concepts(concepts: list[Concept]) -> list[Concept]:
    """Keep the top ranked concepts that clear the confidence threshold."""
    ranked = sorted(concepts, key=lambda concept: concept.value, reverse=True)
    return [c for c in ranked[:MAX_CONCEPTS] if c.value > MIN_CONFIDENCE]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, matching the mobile client."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
