"""Request bodies accepted by the HTTP API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase keys from the mobile client and snake_case in tests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BarcodeRequest(CamelModel):
    barcode: str | None = None


class ManualFoodRequest(CamelModel):
    name: str | None = None
    brand: str | None = None
    category: str | None = None
    barcode: str | None = None
    calories: float | None = None
    carbs: float | None = None
    protein: float | None = None
    fat: float | None = None

    def to_payload(self) -> dict[str, object]:
        """Map the client field names onto storage columns."""
        return {
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "barcode": self.barcode,
            "calories": self.calories,
            "carbs_g": self.carbs,
            "protein_g": self.protein,
            "fat_g": self.fat,
        }


class ScanFoodRequest(CamelModel):
    name: str | None = None
    quantity: float | None = None
    calories: float | None = None
    carbs: float | None = None
    protein: float | None = None
    fat: float | None = None
    source: str | None = None
    source_id: str | None = None
    brand: str | None = None


class CreateScanRequest(CamelModel):
    foods: list[ScanFoodRequest] | None = None
    meal_type: str | None = None
    notes: str | None = None
    image_url: str | None = None


class UpdateScanRequest(CamelModel):
    meal_type: str | None = None
    notes: str | None = None


class AnalyzeImageRequest(CamelModel):
    image: str | None = None


class UpdateProfileRequest(CamelModel):
    name: str | None = None
    email: str | None = None


class UpdatePreferencesRequest(CamelModel):
    language: str | None = None
    dark_mode: bool | None = None
    daily_goal: float | None = None
