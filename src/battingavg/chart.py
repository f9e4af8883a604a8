"""Chart projection of rolling batting averages."""

from __future__ import annotations

from typing import Sequence

from .models import AggregateResult, ChartData, ChartDataset
from .windows import format_label

_HASH_MASK = 0xFFFFFFFF


def string_to_color(name: str) -> str:
    """Derive a stable ``#rrggbb`` color from a name.

    Uses a 32-bit ``hash * 31 + char`` string hash; collisions are acceptable.
    """
    hashed = 0
    for char in name:
        hashed = (ord(char) + ((hashed << 5) - hashed)) & _HASH_MASK

    channels = ((hashed >> (shift * 8)) & 0xFF for shift in range(3))
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def build_chart_data(results: Sequence[AggregateResult]) -> ChartData:
    """Map ordered subject averages onto chart labels and datasets.

    Labels are taken from the rolling window ends of the first subject; every
    subject shares the same rolling windows.
    """
    labels = tuple(format_label(average.end) for average in results[0].averages) if results else ()

    datasets = tuple(
        ChartDataset(
            label=result.assignee,
            data=tuple(average.value for average in result.averages),
            borderColor=string_to_color(result.assignee),
        )
        for result in results
    )

    return ChartData(labels=labels, datasets=datasets)
