"""Models for image recognition results."""

from pydantic import BaseModel, Field


class Concept(BaseModel):
    """Single ranked concept returned by an image classifier."""

    name: str
    value: float = Field(ge=0.0, le=1.0)


class ConceptList(BaseModel):
    """Structured classifier output."""

    concepts: list[Concept]


class DetectedFood(BaseModel):
    """A recognized food resolved to nutrition data."""

    name: str
    quantity_g: float
    carbs_g: float
    calories: int


class ImageAnalysis(BaseModel):
    """Result of analyzing a food photo."""

    foods: list[DetectedFood]
    total_carbs_g: float
    total_calories: int
