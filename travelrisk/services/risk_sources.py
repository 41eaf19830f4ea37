"""
risk_sources.py: Merge weather markers and user reports into one list of
weighted points.

The two inputs are resolved into explicit variants before aggregation:

    WeatherRiskSource    weight is the marker's own risk (0–100 nominal)
    ReportRiskSource     weight comes from the report's level (level table)
                         or, for qualitative reports, the configured
                         default weight (75 unless overridden)

merge_risk_sources() keeps input order: all weather markers first, then
reports, each in the order given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from travelrisk.models.geo import Coordinate
from travelrisk.models.report import ReportOut, RiskType
from travelrisk.models.risk import RiskMarker

WEATHER = "weather"
REPORT = "report"


@dataclass(frozen=True)
class WeatherRiskSource:
    position: Coordinate
    risk: float


@dataclass(frozen=True)
class ReportRiskSource:
    position: Coordinate
    report_id: str
    risk_level: Optional[int] = None
    risk_type: Optional[RiskType] = None


RiskSource = Union[WeatherRiskSource, ReportRiskSource]


@dataclass(frozen=True)
class RiskPoint:
    """A position with a resolved weight, ready for filtering."""

    position: Coordinate
    weight: float
    source: str   # WEATHER | REPORT


def resolve_weight(
    source: RiskSource,
    *,
    report_default_weight: float,
    level_weights: Mapping[int, float],
) -> float:
    if isinstance(source, WeatherRiskSource):
        return source.risk
    if source.risk_level is not None and source.risk_level in level_weights:
        return level_weights[source.risk_level]
    return report_default_weight


def to_sources(markers: list[RiskMarker], reports: list[ReportOut]) -> list[RiskSource]:
    sources: list[RiskSource] = [WeatherRiskSource(m.position, m.risk) for m in markers]
    sources.extend(
        ReportRiskSource(r.coordinates, r.id, r.risk_level, r.risk_type) for r in reports
    )
    return sources


def merge_risk_sources(
    markers: list[RiskMarker],
    reports: list[ReportOut],
    *,
    report_default_weight: float,
    level_weights: Mapping[int, float],
) -> list[RiskPoint]:
    points = []
    for source in to_sources(markers, reports):
        weight = resolve_weight(
            source,
            report_default_weight=report_default_weight,
            level_weights=level_weights,
        )
        kind = WEATHER if isinstance(source, WeatherRiskSource) else REPORT
        points.append(RiskPoint(position=source.position, weight=weight, source=kind))
    return points
