"""Tests for label date parsing and the filtered chart view."""

from __future__ import annotations

from datetime import date

import pytest

from core.filters import DashboardFilters, apply_filters, normalize_filters, parse_label_date
from core.models import Series
from core.seed import monthly_labels

LABELS = monthly_labels(2024)
SERIES = [
    Series(name="Revenue", data=list(range(100, 1300, 100)), color="#007bff"),
    Series(name="Orders", data=list(range(1, 13))),
]


@pytest.mark.parametrize(
    "label,expected",
    [
        ("2024", date(2024, 1, 1)),
        ("2024-03", date(2024, 3, 1)),
        ("2024-03-15", date(2024, 3, 15)),
        (" 2024-03 ", date(2024, 3, 1)),
        ("2024-13", None),
        ("2024-02-30", None),
        ("Jan 2024", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_label_date(label, expected) -> None:
    assert parse_label_date(label) == expected


def test_single_month_range_keeps_one_pair_per_series() -> None:
    view = apply_filters(LABELS, SERIES, DashboardFilters(from_="2024-02", to="2024-02"))

    assert view.labels == ["2024-02"]
    assert [s.data for s in view.series] == [[200], [2]]


def test_day_bounds_compare_against_month_labels() -> None:
    view = apply_filters(LABELS, SERIES, DashboardFilters(from_="2024-03-01", to="2024-05-15"))
    assert view.labels == ["2024-03", "2024-04", "2024-05"]


def test_open_ended_bounds() -> None:
    assert apply_filters(LABELS, SERIES, DashboardFilters(from_="2024-11")).labels == ["2024-11", "2024-12"]
    assert apply_filters(LABELS, SERIES, DashboardFilters(to="2024-02")).labels == ["2024-01", "2024-02"]


def test_series_name_filter() -> None:
    view = apply_filters(LABELS, SERIES, DashboardFilters(series_name="Orders"))
    assert view.labels == LABELS
    assert [s.name for s in view.series] == ["Orders"]


def test_non_date_labels_ignore_bounds() -> None:
    labels = ["north", "south"]
    series = [Series(name="A", data=[1, 2])]
    view = apply_filters(labels, series, DashboardFilters(from_="2024-01", to="2024-01"))
    assert view.labels == labels
    assert view.series[0].data == [1, 2]


def test_unparseable_bound_is_ignored() -> None:
    view = apply_filters(LABELS, SERIES, DashboardFilters(from_="someday", to="2024-01"))
    assert view.labels == ["2024-01"]


def test_filtering_never_mutates_source() -> None:
    labels = list(LABELS)
    series = [Series(name=s.name, data=list(s.data), color=s.color) for s in SERIES]
    apply_filters(labels, series, DashboardFilters(from_="2024-06", to="2024-06", series_name="Revenue"))
    assert labels == LABELS
    assert series == SERIES


def test_normalize_filters_accepts_snapshot_keys() -> None:
    assert normalize_filters({"from": "2024-01", "to": None, "series": "Orders"}) == DashboardFilters(
        from_="2024-01", to="", series_name="Orders"
    )
    assert normalize_filters({"seriesName": "Revenue"}).series_name == "Revenue"
    assert normalize_filters(None) == DashboardFilters()


def test_to_state_round_trips_through_normalize() -> None:
    filters = DashboardFilters(from_="2024-01", to="2024-06", series_name="Orders")
    assert normalize_filters(filters.to_state()) == filters
