from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]


def _labels_as_str(value: Any) -> Any:
    if isinstance(value, list):
        return [str(x) for x in value]
    return value


def _has_non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, dict):
        return any(_has_non_finite(v) for v in value.values())
    if isinstance(value, list):
        return any(_has_non_finite(v) for v in value)
    return False


def _finite_json(value: Any) -> Any:
    # NaN and Infinity parse from a request body but cannot be written back out as JSON
    if _has_non_finite(value):
        raise ValueError("NaN and Infinity are not allowed")
    return value


class SeriesModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    data: List[Optional[Number]] = Field(default_factory=list)
    color: Optional[str] = None


class DatasetCreateModel(BaseModel):
    # Required fields are optional here so the service reports them as a 400, not a 422.
    name: Optional[str] = None
    labels: Optional[List[str]] = None
    series: Optional[List[SeriesModel]] = None
    meta: Optional[Dict[str, Any]] = None

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_labels(cls, value: Any) -> Any:
        return _labels_as_str(value)

    @field_validator("meta")
    @classmethod
    def finite_meta(cls, value: Any) -> Any:
        return _finite_json(value)


class DatasetPatchModel(BaseModel):
    name: Optional[str] = None
    labels: Optional[List[str]] = None
    series: Optional[List[SeriesModel]] = None
    meta: Optional[Dict[str, Any]] = None

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_labels(cls, value: Any) -> Any:
        return _labels_as_str(value)

    @field_validator("meta")
    @classmethod
    def finite_meta(cls, value: Any) -> Any:
        return _finite_json(value)


class SnapshotCreateModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    dashboard_state: Optional[Dict[str, Any]] = Field(default=None, alias="dashboardState")

    @field_validator("dashboard_state")
    @classmethod
    def finite_state(cls, value: Any) -> Any:
        return _finite_json(value)


class InfoResponse(BaseModel):
    ok: bool = True
    app: str
    version: str
    author: str
