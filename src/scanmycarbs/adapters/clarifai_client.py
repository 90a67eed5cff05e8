"""Clarifai food-recognition classifier over the REST API."""

import base64
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError as PydanticValidationError

from scanmycarbs.domain.vision import Concept
from scanmycarbs.errors import ImageRecognitionError
from scanmycarbs.services.vision import ConceptClassifier

_STATUS_SUCCESS = 10000

_logger = logging.getLogger(__name__)


@dataclass
class HttpxClarifaiClassifier(ConceptClassifier):
    """Calls a Clarifai model and returns its ranked concepts."""

    api_key: str
    base_url: str
    model_id: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 5.0

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        model_id: str,
        timeout_seconds: float = 5.0,
    ) -> "HttpxClarifaiClassifier":
        """Create a classifier with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            model_id=model_id,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def classify(self, image_bytes: bytes) -> list[Concept]:
        """Send a base64 image and parse the first output's concepts."""
        url = f"{self.base_url}/v2/models/{self.model_id}/outputs"
        encoded = base64.b64encode(image_bytes).decode("ascii")
        try:
            response = await self.http_client.post(
                url,
                headers={"Authorization": f"Key {self.api_key}"},
                json={"inputs": [{"data": {"image": {"base64": encoded}}}]},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Clarifai request failed: %s", exc)
            raise ImageRecognitionError() from exc
        if not isinstance(payload, dict):
            raise ImageRecognitionError("Image analysis returned an unexpected payload")

        status_code = (payload.get("status") or {}).get("code")
        if status_code is not None and status_code != _STATUS_SUCCESS:
            description = (payload.get("status") or {}).get("description")
            _logger.warning("Clarifai status %s: %s", status_code, description)
            raise ImageRecognitionError()
        try:
            raw_concepts = payload["outputs"][0]["data"].get("concepts") or []
            return [Concept.model_validate(concept) for concept in raw_concepts]
        except (KeyError, IndexError, TypeError, PydanticValidationError) as exc:
            raise ImageRecognitionError(
                "Image analysis returned an unexpected payload"
            ) from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
