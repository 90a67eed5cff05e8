"""Tests for manual food management."""

import pytest

from scanmycarbs.errors import NotFoundError, ValidationError
from scanmycarbs.services.manual_foods import ManualFoodService
from tests.conftest import OTHER_USER_ID, TEST_USER_ID, InMemoryManualFoodRepository

_PAYLOAD = {
    "name": "  Homemade granola ",
    "brand": None,
    "category": "breakfast",
    "barcode": "123",
    "calories": "450",
    "carbs_g": 60,
    "protein_g": 10,
    "fat_g": 18,
}


@pytest.fixture
def service(
    manual_food_repository: InMemoryManualFoodRepository,
) -> ManualFoodService:
    return ManualFoodService(manual_food_repository)


def test_add_cleans_payload(service: ManualFoodService) -> None:
    food = service.add(TEST_USER_ID, dict(_PAYLOAD))

    assert food.name == "Homemade granola"
    assert food.macros.calories == 450
    assert food.user_id == TEST_USER_ID


@pytest.mark.parametrize("missing", ["name", "calories", "carbs_g", "fat_g"])
def test_add_requires_name_and_macros(
    service: ManualFoodService, missing: str
) -> None:
    payload = dict(_PAYLOAD)
    payload[missing] = None

    with pytest.raises(ValidationError, match="Incomplete nutrition information"):
        service.add(TEST_USER_ID, payload)


def test_add_rejects_negative_macros(service: ManualFoodService) -> None:
    with pytest.raises(ValidationError):
        service.add(TEST_USER_ID, {**_PAYLOAD, "fat_g": -1})


def test_update_is_partial(service: ManualFoodService) -> None:
    food = service.add(TEST_USER_ID, dict(_PAYLOAD))

    updated = service.update(TEST_USER_ID, food.id, {"carbs_g": 55, "name": None})

    assert updated.macros.carbs_g == 55
    assert updated.macros.calories == 450
    assert updated.name == "Homemade granola"


def test_foods_are_private_to_their_owner(service: ManualFoodService) -> None:
    food = service.add(TEST_USER_ID, dict(_PAYLOAD))

    assert service.find_owned(OTHER_USER_ID, food.id) is None
    assert service.list_for_user(OTHER_USER_ID) == []
    with pytest.raises(NotFoundError):
        service.update(OTHER_USER_ID, food.id, {"carbs_g": 1})
    with pytest.raises(NotFoundError):
        service.delete(OTHER_USER_ID, food.id)


def test_delete_and_barcode_lookup(service: ManualFoodService) -> None:
    food = service.add(TEST_USER_ID, dict(_PAYLOAD))

    assert service.find_by_barcode(TEST_USER_ID, "123") == food
    assert service.find_by_barcode(OTHER_USER_ID, "123") is None

    service.delete(TEST_USER_ID, food.id)

    assert service.list_for_user(TEST_USER_ID) == []
