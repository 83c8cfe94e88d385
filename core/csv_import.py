from __future__ import annotations

import random
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class ParsedCsv:
    headers: List[str]
    rows: List[List[str]]


def parse_csv(text: str) -> Optional[ParsedCsv]:
    """Simple comma parser: first line is the header, no quoting and no multi-line fields."""
    lines = [line for line in _LINE_SPLIT.split(text or "") if line]
    if len(lines) < 2:
        return None
    headers = [h.strip() for h in lines[0].split(",")]
    rows = [[c.strip() for c in line.split(",")] for line in lines[1:]]
    return ParsedCsv(headers=headers, rows=rows)


def random_color() -> str:
    r, g, b = (random.randint(100, 254) for _ in range(3))
    return f"rgb({r},{g},{b})"


def _as_number(value: float) -> Any:
    return int(value) if float(value).is_integer() else float(value)


def _numeric_column(rows: List[List[str]], col: int) -> List[Any]:
    cells = pd.Series([row[col] if col < len(row) else None for row in rows], dtype="object")
    numbers = pd.to_numeric(cells, errors="coerce").replace([np.inf, -np.inf], np.nan).fillna(0)
    return [_as_number(v) for v in numbers.tolist()]


def build_dataset_from_csv(name: str, parsed: ParsedCsv) -> Dict[str, Any]:
    """Create payload: first column as labels, one series per remaining header; non-numeric cells become 0."""
    labels = [row[0] if row else "" for row in parsed.rows]
    series = [
        {"name": header, "data": _numeric_column(parsed.rows, idx + 1), "color": random_color()}
        for idx, header in enumerate(parsed.headers[1:])
    ]
    return {"name": name, "labels": labels, "series": series, "meta": {}}


def dataset_name_from_filename(filename: str) -> str:
    stem = PurePath(filename).stem if filename else ""
    return stem or filename or "Uploaded dataset"
