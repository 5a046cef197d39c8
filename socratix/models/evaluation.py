from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional


class Evaluation(BaseModel):
    """Terminal structured assessment of a session."""
    completed: bool
    confidence_score: int = Field(
        ge=0,
        le=100,
        validation_alias=AliasChoices("confidence_score", "confidenceScore"),
    )
    summary: str
    feedback: Optional[str] = None

    @field_validator("confidence_score", mode="before")
    @classmethod
    def round_score(cls, value):
        # Models occasionally answer 85.0 or "85"
        if isinstance(value, str):
            value = float(value.strip().rstrip("%"))
        if isinstance(value, float):
            return int(round(value))
        return value
