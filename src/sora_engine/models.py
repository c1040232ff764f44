"""Pydantic models for the per-site assessment record."""

from __future__ import annotations

from enum import StrEnum
import hashlib
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldSource(StrEnum):
    """Who last wrote a suggestible field."""

    USER = "user"
    SITE_SURVEY = "site_survey"
    AIRCRAFT = "aircraft"
    FLIGHT_PLAN = "flight_plan"


COLLABORATOR_SOURCES = frozenset({FieldSource.SITE_SURVEY, FieldSource.AIRCRAFT, FieldSource.FLIGHT_PLAN})


class MitigationSelection(BaseModel):
    """Ground mitigation selection for one mitigation ID."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    robustness: str = "none"
    evidence: str = ""


class TacticalMitigationSelection(BaseModel):
    """Tactical mitigation (TMPR) selection."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    type: str | None = None
    robustness: str = "none"
    evidence: str = ""


class OSODeclaration(BaseModel):
    """Declared OSO robustness with the supporting evidence text."""

    model_config = ConfigDict(extra="ignore")

    robustness: str = "none"
    evidence: str = ""


class ContainmentSelection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    method: str | None = None
    evidence: str = ""


# Fields the auto-suggestion collaborators may fill in.
SUGGESTIBLE_FIELDS = (
    "population_category",
    "adjacent_population_category",
    "ua_characteristic",
    "max_speed",
    "initial_arc",
)

# Fields that do not affect computed results.
_NON_COMPUTED_FIELDS = {"name", "field_sources"}


class SiteAssessment(BaseModel):
    """Mutable assessment record owned by a project site.

    Category fields hold the raw stored keys; they are checked against the
    reference tables when resolved, so legacy records still load.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    site_id: str
    name: str | None = None
    population_category: str | None = None
    ua_characteristic: str | None = None
    max_speed: float | None = Field(default=None, ge=0.0, description="Aircraft max speed (m/s)")
    mitigations: dict[str, MitigationSelection] = Field(default_factory=dict)
    initial_arc: str | None = None
    tmpr: TacticalMitigationSelection = Field(default_factory=TacticalMitigationSelection)
    oso_compliance: dict[str, OSODeclaration] = Field(default_factory=dict)
    adjacent_population_category: str | None = None
    containment: ContainmentSelection = Field(default_factory=ContainmentSelection)
    field_sources: dict[str, FieldSource] = Field(default_factory=dict)

    def set_by_user(self, **changes: Any) -> None:
        """Apply explicit user edits and protect them from auto-sync."""

        for name, value in changes.items():
            if name not in type(self).model_fields or name in _NON_COMPUTED_FIELDS | {"site_id"}:
                raise AttributeError(f"{name} is not an editable assessment field")
            setattr(self, name, value)
            if name in SUGGESTIBLE_FIELDS:
                self.field_sources = {**self.field_sources, name: FieldSource.USER}

    def is_user_set(self, name: str) -> bool:
        return self.field_sources.get(name) is FieldSource.USER

    def accepts_suggestion(self, name: str) -> bool:
        """True when the field is empty or was last written by a collaborator.

        A stored value with no recorded source is treated as the user's.
        """

        if self.is_user_set(name):
            return False
        if getattr(self, name) in (None, ""):
            return True
        return self.field_sources.get(name) in COLLABORATOR_SOURCES

    def missing_required(self) -> tuple[str, ...]:
        """Names of required fields that are still empty."""

        required = ("population_category", "ua_characteristic", "initial_arc")
        return tuple(name for name in required if getattr(self, name) in (None, ""))

    def content_hash(self) -> str:
        """Stable hash of every field that affects the computed result."""

        payload = self.model_dump(mode="json", exclude=_NON_COMPUTED_FIELDS)
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()
