from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from core.models import Series

DATE_LIKE = re.compile(r"^(\d{4})(?:-(\d{2}))?(?:-(\d{2}))?$")


@dataclass(frozen=True)
class DashboardFilters:
    from_: str = ""
    to: str = ""
    series_name: str = ""

    def to_state(self) -> Dict[str, str]:
        return {"from": self.from_, "to": self.to, "series": self.series_name}


@dataclass(frozen=True)
class FilteredView:
    labels: List[str] = field(default_factory=list)
    series: List[Series] = field(default_factory=list)


def parse_label_date(label: Optional[str]) -> Optional[date]:
    """Best-effort date for ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``; missing parts default to 1."""
    if label is None:
        return None
    match = DATE_LIKE.match(str(label).strip())
    if not match:
        return None
    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None


def is_date_like(labels: Sequence[str]) -> bool:
    return bool(labels) and DATE_LIKE.match(str(labels[0]).strip()) is not None


def normalize_filters(raw: Optional[Dict[str, Any]]) -> DashboardFilters:
    """Build filters from a snapshot's ``filters`` mapping or UI state."""
    raw = raw or {}
    series_name = raw.get("seriesName", raw.get("series"))
    return DashboardFilters(
        from_=str(raw.get("from") or "").strip(),
        to=str(raw.get("to") or "").strip(),
        series_name=str(series_name or "").strip(),
    )


def apply_filters(labels: Sequence[str], series: Sequence[Series], filters: DashboardFilters) -> FilteredView:
    """Derive the ``{labels, series}`` view for the chart; inputs are never mutated.

    Date bounds apply only when the first label looks like a date. While a bound
    is active, labels that do not parse are dropped.
    """
    lo = parse_label_date(filters.from_) if filters.from_ else None
    hi = parse_label_date(filters.to) if filters.to else None

    out_labels = list(labels)
    out_series = [Series(name=s.name, data=list(s.data), color=s.color) for s in series]

    if (lo or hi) and is_date_like(labels):
        keep: List[bool] = []
        for label in labels:
            d = parse_label_date(label)
            keep.append(d is not None and (lo is None or d >= lo) and (hi is None or d <= hi))
        out_labels = [lab for lab, k in zip(labels, keep) if k]
        out_series = [
            Series(name=s.name, data=[v for i, v in enumerate(s.data) if i < len(keep) and keep[i]], color=s.color)
            for s in out_series
        ]

    if filters.series_name:
        out_series = [s for s in out_series if s.name == filters.series_name]

    return FilteredView(labels=out_labels, series=out_series)
