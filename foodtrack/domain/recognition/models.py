"""
Domain models for food recognition.

``ClassifierPrediction`` is what the opaque image classifier hands us;
``FoodPrediction`` is what survives label mapping.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClassifierPrediction(BaseModel):
    """
    Raw ranked output of the image classifier.

    Attributes:
        label: Free-text class label (e.g. "Granny Smith, apple")
        confidence: Probability in [0, 1]

    Example:
        >>> pred = ClassifierPrediction(label="banana", confidence=0.87)
        >>> assert pred.confidence > 0.5
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Classifier label")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Classifier probability")


class FoodPrediction(BaseModel):
    """
    Prediction mapped to a canonical food name.

    Example:
        >>> pred = FoodPrediction(name="chicken breast", confidence=0.42)
        >>> assert pred.name == "chicken breast"
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Canonical food name")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Classifier probability")

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Ensure not just whitespace."""
        if not v.strip():
            raise ValueError("Food name cannot be empty or whitespace")
        return v.strip()
