"""Tests for the user and image endpoints."""

import base64

from fastapi.testclient import TestClient

from scanmycarbs.api.app import create_app
from scanmycarbs.containers import AppContainer
from scanmycarbs.errors import ImageRecognitionError, PersistenceError
from tests.conftest import FakeClassifier


def test_profile_is_created_on_first_request(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    response = client.get("/api/user/profile", headers=auth_headers)

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["email"] == "ana@example.com"
    assert user["language"] == "fr"
    assert user["darkMode"] is False


def test_update_profile_conflicting_email(
    client: TestClient,
    auth_headers: dict[str, str],
    other_auth_headers: dict[str, str],
) -> None:
    client.get("/api/user/profile", headers=other_auth_headers)

    response = client.patch(
        "/api/user/profile", json={"email": "bo@example.com"}, headers=auth_headers
    )

    assert response.status_code == 409
    assert response.json() == {"error": "This email is already in use"}


def test_update_profile_and_preferences(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    profile = client.patch(
        "/api/user/profile", json={"name": "Ana"}, headers=auth_headers
    )
    preferences = client.patch(
        "/api/user/preferences",
        json={"language": "en", "darkMode": True, "dailyGoal": 180},
        headers=auth_headers,
    )
    cleared = client.patch(
        "/api/user/preferences", json={"dailyGoal": None}, headers=auth_headers
    )

    assert profile.json()["data"]["user"]["name"] == "Ana"
    assert preferences.json()["message"] == "Preferences updated"
    assert preferences.json()["data"]["user"]["dailyGoal"] == 180
    assert preferences.json()["data"]["user"]["darkMode"] is True
    assert cleared.json()["data"]["user"]["dailyGoal"] is None
    assert cleared.json()["data"]["user"]["language"] == "en"


def test_delete_account_removes_everything(
    client: TestClient, auth_headers: dict[str, str], container: AppContainer
) -> None:
    client.post(
        "/api/scan",
        json={
            "foods": [
                {"name": "Apple", "calories": 52, "carbs": 14, "protein": 0, "fat": 0}
            ]
        },
        headers=auth_headers,
    )
    client.post(
        "/api/food/manual",
        json={"name": "Jam", "calories": 1, "carbs": 1, "protein": 1, "fat": 1},
        headers=auth_headers,
    )

    response = client.delete("/api/user/account", headers=auth_headers)

    assert response.json() == {"success": True, "message": "Account deleted"}
    scans = container.scan_service.repository
    foods = container.manual_food_service.repository
    assert scans.scans == {}
    assert foods.foods == {}


def test_analyze_image(client: TestClient, auth_headers: dict[str, str]) -> None:
    image = base64.b64encode(b"\xff\xd8\xffjpeg").decode()

    response = client.post(
        "/api/image/analyze",
        json={"image": f"data:image/jpeg;base64,{image}"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == {
        "foods": [
            {"name": "Apple, raw", "quantity": 100, "carbs": 14.0, "calories": 52}
        ],
        "totalCarbs": 14.0,
        "totalCalories": 52,
    }


def test_analyze_image_validation(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    missing = client.post("/api/image/analyze", json={}, headers=auth_headers)
    garbled = client.post(
        "/api/image/analyze", json={"image": "%%%"}, headers=auth_headers
    )

    assert missing.status_code == 400
    assert missing.json() == {"error": "Image is required"}
    assert garbled.status_code == 400


def test_analyze_image_classifier_failure(
    client: TestClient, auth_headers: dict[str, str], classifier: FakeClassifier
) -> None:
    classifier.error = ImageRecognitionError()

    response = client.post(
        "/api/image/analyze",
        json={"image": base64.b64encode(b"jpeg").decode()},
        headers=auth_headers,
    )

    assert response.status_code == 502
    assert response.json() == {"error": "Image analysis failed"}


def test_analyze_image_hides_provider_details(
    client: TestClient, auth_headers: dict[str, str], classifier: FakeClassifier
) -> None:
    classifier.error = RuntimeError("POST https://vision.internal/v2 timed out")

    response = client.post(
        "/api/image/analyze",
        json={"image": base64.b64encode(b"jpeg").decode()},
        headers=auth_headers,
    )

    assert response.status_code == 502
    assert response.json() == {"error": "Image analysis failed"}


def test_storage_errors_are_hidden(
    container: AppContainer, auth_headers: dict[str, str]
) -> None:
    def broken_list(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        raise PersistenceError("relation scans does not exist")

    container.scan_service.repository.list_scans = broken_list
    client = TestClient(create_app(container))

    response = client.get("/api/scan", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unexpected_errors_become_generic_500(
    container: AppContainer, auth_headers: dict[str, str]
) -> None:
    def explode(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        raise KeyError("boom")

    container.user_service.get_profile = explode
    client = TestClient(create_app(container), raise_server_exceptions=False)

    response = client.patch(
        "/api/user/profile", json={"name": "Ana"}, headers=auth_headers
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
