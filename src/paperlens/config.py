"""
Runtime settings collected from the environment.

`.env` files are loaded by the entry points (API and CLI) before
`Settings.from_env()` is called.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_DB_URL = "sqlite:///data/paperlens.db"
DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_LLM_MODEL = "gemini-1.5-flash"

_TRUTHY = ("1", "true", "yes", "y", "on")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_str(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _parse_csv_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    store_backend: str = "memory"
    db_url: str = DEFAULT_DB_URL
    seed_demo_data: bool = False
    http_timeout: float = 30.0

    ieee_api_key: Optional[str] = None
    springer_api_key: Optional[str] = None
    elsevier_api_key: Optional[str] = None
    ncbi_api_key: Optional[str] = None
    contact_email: Optional[str] = None

    llm_api_key: Optional[str] = None
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        backend = (os.getenv("PAPERLENS_STORE") or "memory").strip().lower()
        if backend not in ("memory", "sqlalchemy"):
            raise ValueError(f"PAPERLENS_STORE must be 'memory' or 'sqlalchemy', got {backend!r}")
        return cls(
            store_backend=backend,
            db_url=_env_str("PAPERLENS_DB_URL") or DEFAULT_DB_URL,
            seed_demo_data=_env_bool("PAPERLENS_SEED_DEMO_DATA"),
            http_timeout=_env_float("PAPERLENS_HTTP_TIMEOUT", 30.0),
            ieee_api_key=_env_str("IEEE_API_KEY"),
            springer_api_key=_env_str("SPRINGER_API_KEY"),
            elsevier_api_key=_env_str("ELSEVIER_API_KEY"),
            ncbi_api_key=_env_str("NCBI_API_KEY"),
            contact_email=_env_str("CONTACT_EMAIL"),
            llm_api_key=_env_str("LLM_API_KEY") or _env_str("GEMINI_API_KEY"),
            llm_base_url=_env_str("LLM_BASE_URL") or DEFAULT_LLM_BASE_URL,
            llm_model=_env_str("LLM_MODEL") or DEFAULT_LLM_MODEL,
            cors_origins=_parse_csv_env("PAPERLENS_CORS_ORIGINS", "*"),
        )
