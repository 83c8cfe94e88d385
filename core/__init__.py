"""Core (UI-agnostic) dashboard logic.

This package contains:
- the JSON document store and the dataset/snapshot services
- the admin token guard
- label date filtering and CSV import
- rendering adapters (Altair / Plotly) and export helpers
- the frontend controller and its HTTP client
"""

__version__ = "1.0.0"
