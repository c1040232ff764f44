"""Operational Safety Objective compliance against the SAIL requirements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .tables import (
    OSO_CATALOG,
    SAIL,
    OSOCategory,
    OSORequirement,
    Robustness,
    oso_definition,
)


@dataclass(frozen=True)
class OSOResult:
    """Required versus declared robustness for one OSO."""

    id: str
    name: str
    category: OSOCategory
    required: OSORequirement
    achieved: Robustness
    compliant: bool
    gap: int
    evidence: str

    @property
    def optional(self) -> bool:
        return self.required is OSORequirement.OPTIONAL


@dataclass(frozen=True)
class OSOReport:
    sail: SAIL
    results: tuple[OSOResult, ...]
    compliant_count: int
    total_required: int
    optional_count: int
    overall_compliant: bool

    @property
    def gaps(self) -> tuple[OSOResult, ...]:
        return tuple(result for result in self.results if not result.compliant)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sail": str(self.sail),
            "results": [
                {
                    "id": result.id,
                    "name": result.name,
                    "category": str(result.category),
                    "required": str(result.required),
                    "achieved": str(result.achieved),
                    "compliant": result.compliant,
                    "gap": result.gap,
                    "evidence": result.evidence,
                }
                for result in self.results
            ],
            "summary": {
                "compliant_count": self.compliant_count,
                "total_required": self.total_required,
                "optional_count": self.optional_count,
                "overall_compliant": self.overall_compliant,
            },
        }


def _declaration_fields(declaration: object) -> tuple[object, str]:
    if declaration is None:
        return Robustness.NONE, ""
    if isinstance(declaration, Mapping):
        return declaration.get("robustness", Robustness.NONE), declaration.get("evidence", "") or ""
    return getattr(declaration, "robustness", Robustness.NONE), getattr(declaration, "evidence", "") or ""


def evaluate_oso(required: OSORequirement, achieved: Robustness) -> tuple[bool, int]:
    """Return (compliant, gap) for a required and an achieved robustness."""

    gap = max(0, required.rank - achieved.rank)
    return required is OSORequirement.OPTIONAL or gap == 0, gap


def check_oso_compliance(sail: SAIL | str, declared: Mapping[str, object] | None = None) -> OSOReport:
    """Compare declared OSO robustness with what the SAIL requires."""

    sail = SAIL.parse(sail)
    declared = declared or {}
    for oso_id in declared:
        # Unknown identifiers point at a corrupted or legacy record.
        oso_definition(oso_id)

    results = []
    for oso in OSO_CATALOG:
        robustness, evidence = _declaration_fields(declared.get(oso.id))
        achieved = Robustness.parse(robustness)
        required = oso.required(sail)
        compliant, gap = evaluate_oso(required, achieved)
        results.append(
            OSOResult(
                id=oso.id,
                name=oso.name,
                category=oso.category,
                required=required,
                achieved=achieved,
                compliant=compliant,
                gap=gap,
                evidence=evidence,
            )
        )

    required_results = [result for result in results if not result.optional]
    compliant_count = sum(1 for result in required_results if result.compliant)
    return OSOReport(
        sail=sail,
        results=tuple(results),
        compliant_count=compliant_count,
        total_required=len(required_results),
        optional_count=len(results) - len(required_results),
        overall_compliant=compliant_count == len(required_results),
    )


def high_robustness_osos(sail: SAIL | str) -> tuple[str, ...]:
    """OSO identifiers that require High robustness at ``sail``."""

    sail = SAIL.parse(sail)
    return tuple(oso.id for oso in OSO_CATALOG if oso.required(sail) is OSORequirement.HIGH)
