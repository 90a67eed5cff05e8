"""OpenAI Responses API classifier for food photos."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from scanmycarbs.domain.vision import Concept, ConceptList
from scanmycarbs.errors import ImageRecognitionError
from scanmycarbs.services.vision import ConceptClassifier, to_data_url

_logger = logging.getLogger(__name__)

CONCEPT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "concepts": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "value": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                },
                "required": ["name", "value"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["concepts"],
    "additionalProperties": False,
}

_PROMPT = (
    "List the foods visible in the image, most likely first. "
    "Use short generic food names and give each a confidence between 0 and 1."
)


@dataclass
class OpenAIConceptClassifier(ConceptClassifier):
    """Classifier backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIConceptClassifier":
        """Create an OpenAI classifier."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def classify(self, image_bytes: bytes) -> list[Concept]:
        """Call the Responses API and validate the structured output."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": _PROMPT},
                        {"type": "input_image", "image_url": to_data_url(image_bytes)},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "food_concepts",
                    "strict": True,
                    "schema": CONCEPT_SCHEMA,
                }
            },
            "store": False,
        }
        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            _logger.warning("OpenAI classification failed: %s", exc)
            raise ImageRecognitionError() from exc
        output_text = response.output_text
        if not output_text:
            raise ImageRecognitionError("OpenAI returned an empty response")
        try:
            return ConceptList.model_validate(json.loads(output_text)).concepts
        except (ValueError, PydanticValidationError) as exc:
            raise ImageRecognitionError(
                "Image analysis returned an unexpected payload"
            ) from exc

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
