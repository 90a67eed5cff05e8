"""Food search, details, barcode and manual food endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from scanmycarbs.api import serializers
from scanmycarbs.api.deps import current_user, get_container, optional_user
from scanmycarbs.api.schemas import BarcodeRequest, ManualFoodRequest
from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.models import UserRecord
from scanmycarbs.domain.nutrition import FoodSource
from scanmycarbs.errors import NotFoundError

router = APIRouter(prefix="/api/food", tags=["food"])


@router.get("/search")
async def search_foods(  # noqa: PLR0913
    query: str | None = None,
    limit: int = 10,
    brands: str | None = None,
    categories: str | None = None,
    labels: str | None = None,
    container: AppContainer = Depends(get_container),
    _user: UserRecord | None = Depends(optional_user),
) -> dict[str, object]:
    """Search the national database and packaged products.

    ``brands``, ``categories`` and ``labels`` filter packaged products by tag.
    """
    results = await container.food_resolver.search(
        query or "", limit, brands=brands, categories=categories, labels=labels
    )
    return serializers.envelope(
        {
            "results": [serializers.food(item) for item in results],
            "total": len(results),
        }
    )


@router.get("/common")
async def common_foods(
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return everyday foods for quick entry."""
    foods = container.food_resolver.common_foods()
    return serializers.envelope({"foods": [serializers.food(item) for item in foods]})


@router.post("/barcode")
async def lookup_barcode(
    body: BarcodeRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord | None = Depends(optional_user),
) -> dict[str, object]:
    """Resolve a barcode, preferring the caller's own foods."""
    food = await container.food_resolver.resolve_barcode(
        body.barcode or "", user.id if user else None
    )
    if food is None:
        raise NotFoundError("Product not found")
    return serializers.envelope({"food": serializers.food(food)})


@router.post("/manual", status_code=status.HTTP_201_CREATED)
async def add_manual_food(
    body: ManualFoodRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Create a food entered by hand."""
    food = container.manual_food_service.add(user.id, body.to_payload())
    return serializers.envelope(
        {"food": serializers.manual_food(food)}, message="Food added"
    )


@router.get("/manual/my-foods")
async def list_manual_foods(
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """List the caller's manual foods, newest first."""
    foods = container.manual_food_service.list_for_user(user.id)
    return serializers.envelope(
        {"foods": [serializers.manual_food(item) for item in foods]}
    )


@router.patch("/manual/{food_id}")
async def update_manual_food(
    food_id: UUID,
    body: ManualFoodRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    food = container.manual_food_service.update(user.id, food_id, body.to_payload())
    return serializers.envelope(
        {"food": serializers.manual_food(food)}, message="Food updated"
    )


@router.delete("/manual/{food_id}")
async def delete_manual_food(
    food_id: UUID,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    container.manual_food_service.delete(user.id, food_id)
    return serializers.envelope(message="Food deleted")


@router.get("/{food_id}")
async def food_details(
    food_id: str,
    source: str = FoodSource.NATIONAL_DB.value,
    container: AppContainer = Depends(get_container),
    user: UserRecord | None = Depends(optional_user),
) -> dict[str, object]:
    """Return one food from the provider named by ``source``."""
    food = await container.food_resolver.get_details(
        food_id, source, user.id if user else None
    )
    if food is None:
        raise NotFoundError("Food not found")
    return serializers.envelope({"food": serializers.food(food)})
