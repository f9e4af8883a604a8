"""Domain models for batting average and RBI computation.

These dataclasses intentionally model only the subset of Jira issue fields that
are required for the metrics, plus the aggregate shapes produced from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

NO_DATA_MARKER = "-"


@dataclass(frozen=True, slots=True)
class Record:
    """Represents one resolved, enriched issue used for KPI calculations."""

    key: str
    assignee: Optional[str]
    resolution_date: datetime
    estimated_complete_date: Optional[datetime]
    deviation_days: Optional[int]
    point_value: float = 0.0
    issue_type: str = "Story"
    summary: str = ""


@dataclass(frozen=True, slots=True)
class Window:
    """Represents a half-open calendar interval ``[start, end)``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True, slots=True)
class Numeric:
    """A computed batting ratio."""

    value: float

    def to_json(self) -> float:
        return self.value


@dataclass(frozen=True, slots=True)
class NoData:
    """Marks an aggregation point with zero eligible records."""

    def to_json(self) -> str:
        return NO_DATA_MARKER


BattingValue = Union[Numeric, NoData]


@dataclass(frozen=True, slots=True)
class WindowAverage:
    """Represents the batting value of one subject over one rolling window."""

    start: datetime
    end: datetime
    value: BattingValue


@dataclass(frozen=True, slots=True)
class AggregateResult:
    """Represents a subject's batting values across all rolling windows."""

    assignee: str
    averages: Tuple[WindowAverage, ...]

    @property
    def last_value(self) -> BattingValue:
        if not self.averages:
            return NoData()
        return self.averages[-1].value


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """Represents one leaderboard row; score is a batting value or point total."""

    assignee: str
    score: Union[BattingValue, float]

    def to_dict(self) -> Dict[str, Any]:
        score = self.score
        if isinstance(score, (Numeric, NoData)):
            return {"assignee": self.assignee, "score": score.to_json()}
        return {"assignee": self.assignee, "score": score}


@dataclass(frozen=True, slots=True)
class ChartDataset:
    """Represents one line series of the rolling average chart."""

    label: str
    data: Tuple[BattingValue, ...]
    borderColor: str
    borderWidth: int = 3
    fill: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "data": [value.to_json() for value in self.data],
            "borderColor": self.borderColor,
            "borderWidth": self.borderWidth,
            "fill": self.fill,
        }


@dataclass(frozen=True, slots=True)
class ChartData:
    """Represents parallel labels and datasets for the rolling average chart."""

    labels: Tuple[str, ...]
    datasets: Tuple[ChartDataset, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "labels": list(self.labels),
            "datasets": [dataset.to_dict() for dataset in self.datasets],
        }


@dataclass(frozen=True, slots=True)
class StatsReport:
    """Represents the complete output of one stats generation run."""

    chartData: ChartData
    leaderboardByRatio: Tuple[LeaderboardEntry, ...]
    leaderboardByPoints: Tuple[LeaderboardEntry, ...]
    generatedAt: datetime

    def to_dict(self) -> Dict[str, Any]:
        leaders_by_ratio: List[Dict[str, Any]] = [entry.to_dict() for entry in self.leaderboardByRatio]
        leaders_by_points: List[Dict[str, Any]] = [entry.to_dict() for entry in self.leaderboardByPoints]
        return {
            "chartData": self.chartData.to_dict(),
            "leaderboardByRatio": leaders_by_ratio,
            "leaderboardByPoints": leaders_by_points,
            "generatedAt": self.generatedAt.isoformat(),
        }
