"""Coverage score derivation."""
from __future__ import annotations

import math
from typing import List, Mapping

from live_session.models import CoverageResult, Extraction, FieldStatus, FieldStatusLiteral, Framework

COVERED_CONFIDENCE = 0.5
COMPLETE_CONFIDENCE = 0.7


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def field_status(extraction: Extraction | None) -> FieldStatusLiteral:
    """Classify one field: complete above 0.7, partial above zero, else missing."""

    if extraction is None or extraction.confidence <= 0.0:
        return "missing"
    if extraction.confidence > COMPLETE_CONFIDENCE:
        return "complete"
    return "partial"


def compute(framework: Framework, snapshot: Mapping[str, Extraction]) -> CoverageResult:
    """Derive the coverage percentage and per-field statuses.

    The denominator is every framework field, required or not. Keys in the
    snapshot that are not framework fields are ignored. ``per_field`` keeps
    framework order.
    """

    per_field: List[FieldStatus] = []
    covered = 0
    for item in framework.fields:
        extraction = snapshot.get(item.key)
        if extraction is not None and extraction.confidence > COVERED_CONFIDENCE:
            covered += 1
        per_field.append(
            FieldStatus(
                key=item.key,
                label=item.label,
                required=item.required,
                status=field_status(extraction),
                confidence=extraction.confidence if extraction else None,
                value=extraction.value if extraction else None,
            )
        )

    total = len(framework.fields)
    percentage = _round_half_up(100 * covered / total) if total else 0
    return CoverageResult(percentage=percentage, per_field=per_field)


__all__ = ["COMPLETE_CONFIDENCE", "COVERED_CONFIDENCE", "compute", "field_status"]
