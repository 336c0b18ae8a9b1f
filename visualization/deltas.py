"""Period-over-period deltas used to color treemap nodes.

Deltas are computed on demand from the past and current report tables and are
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True, slots=True)
class MetricDelta:
    """Difference between a past and a current metric value.

    Attributes:
        baseline: Past-period value.
        comparison: Current-period value.
        absolute: `comparison - baseline`.
        percent: Relative change as a fraction, or None when the baseline is 0.
    """

    baseline: float
    comparison: float
    absolute: float
    percent: float | None


def delta(baseline: float, comparison: float) -> MetricDelta:
    """Compute absolute and percentage delta between two values.

    Args:
        baseline: Past-period value.
        comparison: Current-period value.

    Returns:
        MetricDelta with absolute and percentage changes. Percentage delta is
        None when the baseline is 0.
    """

    absolute = comparison - baseline
    percent: float | None
    if baseline == 0:
        percent = None
    else:
        percent = absolute / baseline
    return MetricDelta(
        baseline=baseline,
        comparison=comparison,
        absolute=absolute,
        percent=percent,
    )


def evolution_percent(current: float, past: float | None) -> int:
    """Return the whole-number percent change shown on an evolution node.

    A row with no past value (or a past value of 0) counts as +100%, unless the
    current value is 0 as well.

    Args:
        current: Current-period metric value.
        past: Past-period metric value, or None when the row did not exist.

    Returns:
        Percent change rounded half away from zero.
    """

    computed = delta(past or 0, current)
    if computed.percent is None:
        return 0 if current == 0 else 100
    percent = Decimal(str(computed.percent * 100))
    return int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))
