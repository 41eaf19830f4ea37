"""
aggregator.py: Turn the points inside a corridor into one trip score.

score = mean of weights, rounded to 2 decimals; 0.0 when nothing is
inside the corridor. [20, 40, 60] → 40.0.
"""

from __future__ import annotations

from dataclasses import dataclass

from travelrisk.models.geo import HeatmapPoint
from travelrisk.services.risk_sources import RiskPoint


@dataclass(frozen=True)
class AggregateRiskScore:
    value: float
    sample_count: int


@dataclass(frozen=True)
class RiskAggregation:
    score: AggregateRiskScore
    heatmap_points: list[HeatmapPoint]


def mean_weight(weights: list[float]) -> float:
    if not weights:
        return 0.0
    return round(sum(weights) / len(weights), 2)


def aggregate_risk(points: list[RiskPoint]) -> RiskAggregation:
    weights = [p.weight for p in points]
    return RiskAggregation(
        score=AggregateRiskScore(value=mean_weight(weights), sample_count=len(points)),
        heatmap_points=[HeatmapPoint(position=p.position, weight=p.weight) for p in points],
    )
