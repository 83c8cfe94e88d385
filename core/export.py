from __future__ import annotations

import json
import re
from typing import Any, Dict, Tuple, Union

import altair as alt

from core.models import Dataset

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|]+')


def export_filename(name: str, extension: str) -> str:
    base = _UNSAFE_FILENAME.sub("_", name or "").strip() or "chart"
    return f"{base}.{extension}"


def dataset_to_json(dataset: Dataset) -> Tuple[str, bytes]:
    """JSON download of a dataset, as ``(filename, payload)``."""
    payload = json.dumps(dataset.to_dict(), indent=2).encode("utf-8")
    return export_filename(dataset.name, "json"), payload


def dataset_payload_from_export(raw: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
    """Turn an exported dataset back into a create payload; id and timestamps are dropped."""
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return {
        "name": data.get("name"),
        "labels": data.get("labels"),
        "series": data.get("series"),
        "meta": data.get("meta") or {},
    }


def chart_to_html(chart: alt.TopLevelMixin, name: str = "chart") -> Tuple[str, bytes]:
    """Standalone HTML rendering of the main chart for download."""
    return export_filename(name, "html"), chart.to_html().encode("utf-8")
