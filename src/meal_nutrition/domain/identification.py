"""Models for meal identification results."""

from pydantic import BaseModel, Field, field_validator


class IdentifiedFood(BaseModel):
    """Single food item named by the identification model."""

    name: str = Field(min_length=1)
    portion_text: str | None = None
    confidence: float | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("portion_text", mode="before")
    @classmethod
    def _coerce_portion(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value)


class IdentificationExtract(BaseModel):
    """Structured output for meal identification."""

    foods: list[object] = Field(default_factory=list)
    summary: str | None = None
