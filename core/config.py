"""Runtime configuration.

All environment reads happen here; the API and the Streamlit app consume a
``Settings`` object instead of calling ``os.getenv`` themselves.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.errors import ConfigError


ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_PORT = 4000
DEFAULT_ADMIN_TOKEN = "CHANGE_THIS_ADMIN_TOKEN_please"
DEFAULT_DATA_FILE = ROOT_DIR / "data.json"
DEFAULT_STATIC_DIR = ROOT_DIR / "public"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    admin_token: str = DEFAULT_ADMIN_TOKEN
    data_file: Path = DEFAULT_DATA_FILE
    static_dir: Path = DEFAULT_STATIC_DIR
    api_base_url: str = f"http://localhost:{DEFAULT_PORT}"
    log_level: str = "INFO"

    @property
    def uses_default_token(self) -> bool:
        return self.admin_token == DEFAULT_ADMIN_TOKEN

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a ``.env`` file if present)."""
        load_dotenv()
        port = _parse_port(os.getenv("PORT"))
        return cls(
            port=port,
            admin_token=os.getenv("ADMIN_TOKEN") or DEFAULT_ADMIN_TOKEN,
            data_file=Path(os.getenv("DATA_FILE") or DEFAULT_DATA_FILE).expanduser(),
            static_dir=Path(os.getenv("STATIC_DIR") or DEFAULT_STATIC_DIR).expanduser(),
            api_base_url=(os.getenv("API_BASE_URL") or f"http://localhost:{port}").rstrip("/"),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def _parse_port(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError(f"PORT must be an integer, got {raw!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"PORT out of range: {port}")
    return port


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
