from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.services.symptom_visibility_service import VisibilityAction


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EffectiveSymptomOut(CamelModel):
    id: str
    slug: str
    name: str
    age_group: str | None = None
    brief_instruction: str | None = None
    source: Literal["base", "override", "custom"]
    base_symptom_id: str | None = None
    is_enabled: bool = True


class EffectiveSymptomsOut(CamelModel):
    symptoms: list[EffectiveSymptomOut]


class SurgerySymptomsPatchIn(CamelModel):
    action: VisibilityAction
    surgery_id: str = Field(..., min_length=1)
    base_symptom_id: str | None = None
    custom_symptom_id: str | None = None

    @field_validator("surgery_id", mode="before")
    @classmethod
    def _strip_required(cls, value: object) -> str:
        if value is None:
            raise ValueError("surgeryId is required for this action")
        return str(value).strip()

    @field_validator("base_symptom_id", "custom_symptom_id", mode="before")
    @classmethod
    def _strip_optional(cls, value: object) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class OkOut(CamelModel):
    ok: bool = True
