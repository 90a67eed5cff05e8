"""Tests for the image classifier adapters."""

import asyncio
import json

import httpx
import pytest
from openai import OpenAIError

from scanmycarbs.adapters.clarifai_client import HttpxClarifaiClassifier
from scanmycarbs.adapters.openai_vision_client import OpenAIConceptClassifier
from scanmycarbs.errors import ImageRecognitionError


def _clarifai(handler) -> HttpxClarifaiClassifier:  # type: ignore[no-untyped-def]
    return HttpxClarifaiClassifier(
        api_key="key-123",
        base_url="https://clarifai.test",
        model_id="food-item-recognition",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_clarifai_classifier_parses_concepts() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "status": {"code": 10000},
                "outputs": [
                    {
                        "data": {
                            "concepts": [
                                {"id": "a", "name": "apple", "value": 0.93},
                                {"id": "b", "name": "pear", "value": 0.41},
                            ]
                        }
                    }
                ],
            },
        )

    concepts = asyncio.run(_clarifai(handler).classify(b"image"))

    assert [(c.name, c.value) for c in concepts] == [("apple", 0.93), ("pear", 0.41)]
    request = seen[0]
    assert request.url.path == "/v2/models/food-item-recognition/outputs"
    assert request.headers["Authorization"] == "Key key-123"
    body = json.loads(request.content.decode())
    assert body["inputs"][0]["data"]["image"]["base64"] == "aW1hZ2U="


def test_clarifai_classifier_raises_on_failed_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"status": {"code": 11102, "description": "Invalid request"}}
        )

    with pytest.raises(ImageRecognitionError) as excinfo:
        asyncio.run(_clarifai(handler).classify(b"image"))

    assert excinfo.value.message == "Image analysis failed"


def test_clarifai_classifier_raises_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline: 10.0.0.7:443", request=request)

    with pytest.raises(ImageRecognitionError) as excinfo:
        asyncio.run(_clarifai(handler).classify(b"image"))

    assert excinfo.value.message == "Image analysis failed"
    assert "10.0.0.7" not in excinfo.value.message


class _FakeResponses:
    def __init__(self, output_text: str = "", error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, responses: _FakeResponses) -> None:
        self.responses = responses
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_classifier_parses_structured_output() -> None:
    responses = _FakeResponses(
        json.dumps({"concepts": [{"name": "banana", "value": 0.8}]})
    )
    fake = _FakeOpenAI(responses)
    classifier = OpenAIConceptClassifier(client=fake, model="gpt-5.2")

    concepts = asyncio.run(classifier.classify(b"\x89PNG\r\n\x1a\nrest"))
    asyncio.run(classifier.close())

    assert [c.name for c in concepts] == ["banana"]
    assert responses.last_payload is not None
    assert responses.last_payload["model"] == "gpt-5.2"
    assert responses.last_payload["store"] is False
    image_part = responses.last_payload["input"][0]["content"][1]
    assert image_part["image_url"].startswith("data:image/png;base64,")
    assert fake.closed


def test_openai_classifier_wraps_api_errors() -> None:
    classifier = OpenAIConceptClassifier(
        client=_FakeOpenAI(
            _FakeResponses(error=OpenAIError("quota exceeded for org-abc123"))
        ),
        model="gpt-5.2",
    )

    with pytest.raises(ImageRecognitionError) as excinfo:
        asyncio.run(classifier.classify(b"image"))

    assert excinfo.value.message == "Image analysis failed"


def test_openai_classifier_rejects_empty_output() -> None:
    classifier = OpenAIConceptClassifier(
        client=_FakeOpenAI(_FakeResponses("")), model="gpt-5.2"
    )

    with pytest.raises(ImageRecognitionError):
        asyncio.run(classifier.classify(b"image"))
