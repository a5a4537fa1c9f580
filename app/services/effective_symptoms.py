"""Effective symptom resolution.

A surgery sees the shared base library merged with its own overrides, plus any
custom symptoms it has created. Visibility switches can disable individual
entries; hidden overrides remove a base symptom entirely.

The merge is a pure function over already-loaded rows so it can be reused by
the review endpoints, the bulk approve flow, and the review flag refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Sequence

from app.models.symptom import BaseSymptom, SurgeryCustomSymptom, SurgerySymptomOverride, SurgerySymptomStatus

SymptomSource = Literal["base", "override", "custom"]


@dataclass
class EffectiveSymptom:
    id: str
    slug: str
    name: str
    age_group: str | None
    brief_instruction: str | None
    source: SymptomSource
    base_symptom_id: str | None = None
    is_enabled: bool = True


@dataclass
class VisibilityTarget:
    base_symptom_id: str | None = None
    custom_symptom_id: str | None = None


def review_key(symptom_id: str, age_group: Optional[str]) -> str:
    """Identity of one reviewable symptom/age-band pair."""
    return f"{symptom_id}-{age_group or ''}"


def symptom_review_key(symptom: EffectiveSymptom) -> str:
    return review_key(symptom.id, symptom.age_group)


def visibility_target(symptom: EffectiveSymptom) -> VisibilityTarget:
    if symptom.source == "custom":
        return VisibilityTarget(custom_symptom_id=symptom.id)
    return VisibilityTarget(base_symptom_id=symptom.base_symptom_id or symptom.id)


def _pick(override_value: str | None, base_value: str | None) -> str | None:
    if override_value is not None and override_value.strip() != "":
        return override_value
    return base_value


def merge_effective_symptoms(
    base: Sequence[BaseSymptom],
    overrides: Iterable[SurgerySymptomOverride],
    customs: Iterable[SurgeryCustomSymptom],
    statuses: Iterable[SurgerySymptomStatus],
    *,
    include_disabled: bool = False,
) -> list[EffectiveSymptom]:
    disabled_base_ids: set[str] = set()
    disabled_custom_ids: set[str] = set()
    for row in statuses:
        if row.is_enabled:
            continue
        if row.base_symptom_id:
            disabled_base_ids.add(row.base_symptom_id)
        if row.custom_symptom_id:
            disabled_custom_ids.add(row.custom_symptom_id)

    by_base_id: dict[str, EffectiveSymptom] = {
        b.id: EffectiveSymptom(
            id=b.id,
            slug=b.slug,
            name=b.name,
            age_group=b.age_group,
            brief_instruction=b.brief_instruction,
            source="base",
        )
        for b in base
        if not b.is_deleted
    }

    for o in overrides:
        current = by_base_id.get(o.base_symptom_id)
        if current is None:
            continue
        if o.is_hidden:
            del by_base_id[o.base_symptom_id]
            continue

        by_base_id[o.base_symptom_id] = EffectiveSymptom(
            id=current.id,
            slug=current.slug,
            name=_pick(o.name, current.name) or current.name,
            age_group=_pick(o.age_group, current.age_group),
            brief_instruction=_pick(o.brief_instruction, current.brief_instruction),
            source="override",
            base_symptom_id=current.id,
        )

    effective: list[EffectiveSymptom] = []
    for symptom in by_base_id.values():
        symptom.is_enabled = symptom.id not in disabled_base_ids
        if symptom.is_enabled or include_disabled:
            effective.append(symptom)

    for c in customs:
        if c.is_deleted:
            continue
        is_enabled = c.id not in disabled_custom_ids
        if not is_enabled and not include_disabled:
            continue
        effective.append(
            EffectiveSymptom(
                id=c.id,
                slug=c.slug,
                name=c.name,
                age_group=c.age_group,
                brief_instruction=c.brief_instruction,
                source="custom",
                is_enabled=is_enabled,
            )
        )

    return effective
