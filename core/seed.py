from __future__ import annotations

import logging
import random
from typing import List, Optional

from core.datasets import DatasetService
from core.models import Dataset, Series

logger = logging.getLogger(__name__)

SAMPLE_NAME = "Sample Sales 2024"


def monthly_labels(year: int, months: int = 12) -> List[str]:
    return [f"{year}-{m:02d}" for m in range(1, months + 1)]


def ensure_sample_dataset(service: DatasetService, rng: Optional[random.Random] = None) -> Optional[Dataset]:
    """Seed a sample dataset when the collection is empty; returns it, or None when data already exists."""
    if service.list():
        logger.info("datasets already exist, skipping sample seed")
        return None
    rng = rng or random.Random()
    labels = monthly_labels(2024)
    dataset = service.create(
        name=SAMPLE_NAME,
        labels=labels,
        series=[
            Series(name="Revenue", data=[rng.randint(500, 4999) for _ in labels], color="#007bff"),
            Series(name="Orders", data=[rng.randint(50, 499) for _ in labels], color="#28a745"),
        ],
        meta={"currency": "USD"},
    )
    logger.info("sample dataset added: %s", dataset.id)
    return dataset
