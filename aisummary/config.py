"""Simplified configuration management."""

import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = _PROJECT_ROOT / ".env"
    if not env_path.is_file():
        return
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                key, value = stripped.split("=", 1)
                key, value = key.strip(), value.strip().strip("'\"")
                if key and value and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        pass


_load_env_file()


DEFAULT_APP_NAME = "AISummary"
DEFAULT_APP_VERSION = "0.2.0"

DEFAULT_ENDPOINT_URL = "http://localhost:11434/v1/chat/completions"
DEFAULT_MODEL_NAME = "deepseek-r1:14b"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TIMEOUT_SECONDS = 120.0


def _env_int(name: str, fallback: int) -> int:
    """Positive integer from the environment, else *fallback*."""
    try:
        value = int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _env_float(name: str, fallback: float) -> float:
    """Positive float from the environment, else *fallback*."""
    try:
        value = float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _env_optional_float(name: str, fallback: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None:
        return fallback
    if not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return fallback


def _env_optional_str(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _get_port() -> int:
    """Get server port, checking PORT first, then AISUMMARY_PORT."""
    port = os.getenv("PORT") or os.getenv("AISUMMARY_PORT")
    if port:
        try:
            return int(port)
        except ValueError:
            pass
    return 8010


def _default_data_path() -> Path:
    raw = _env_optional_str("AISUMMARY_DATA_PATH")
    if raw:
        return Path(raw).expanduser()
    return _PROJECT_ROOT / "data" / "worklogs.json"


def _default_report_dir() -> Path:
    raw = _env_optional_str("AISUMMARY_REPORT_DIR")
    if raw:
        return Path(raw).expanduser()
    return Path(tempfile.gettempdir()) / "aisummary-reports"


class EndpointConfig(BaseModel):
    """Everything needed to reach one chat-completion endpoint."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    model_name: str = DEFAULT_MODEL_NAME
    api_key: Optional[str] = None
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    temperature: Optional[float] = DEFAULT_TEMPERATURE
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)


class Settings(BaseModel):
    """Application settings with lightweight env fallbacks."""

    model_config = ConfigDict(protected_namespaces=())

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default_factory=lambda: os.getenv("AISUMMARY_HOST", "127.0.0.1"))
    server_port: int = Field(default_factory=_get_port)

    # Chat-completion endpoint
    endpoint_url: str = Field(
        default_factory=lambda: os.getenv("AISUMMARY_ENDPOINT_URL", DEFAULT_ENDPOINT_URL)
    )
    model_name: str = Field(default_factory=lambda: os.getenv("AISUMMARY_MODEL", DEFAULT_MODEL_NAME))
    api_key: Optional[str] = Field(default_factory=lambda: _env_optional_str("AISUMMARY_API_KEY"))
    max_tokens: int = Field(
        default_factory=lambda: _env_int("AISUMMARY_MAX_TOKENS", DEFAULT_MAX_TOKENS), gt=0
    )
    temperature: Optional[float] = Field(
        default_factory=lambda: _env_optional_float("AISUMMARY_TEMPERATURE", DEFAULT_TEMPERATURE)
    )
    timeout_seconds: float = Field(
        default_factory=lambda: _env_float("AISUMMARY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS), gt=0
    )

    # Storage and reports
    data_path: Path = Field(default_factory=_default_data_path)
    report_dir: Path = Field(default_factory=_default_report_dir)
    timezone: str = Field(default_factory=lambda: os.getenv("AISUMMARY_TIMEZONE", "UTC"))
    report_language: str = Field(
        default_factory=lambda: os.getenv("AISUMMARY_REPORT_LANGUAGE", "Simplified Chinese")
    )
    store_reports: bool = Field(default_factory=lambda: os.getenv("AISUMMARY_STORE_REPORTS", "1") != "0")

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(
        default_factory=lambda: os.getenv("AISUMMARY_CORS_ALLOW_ORIGINS", "*")
    )
    enable_docs: bool = Field(default_factory=lambda: os.getenv("AISUMMARY_ENABLE_DOCS", "1") != "0")
    docs_url: Optional[str] = Field(default_factory=lambda: os.getenv("AISUMMARY_DOCS_URL", "/docs"))

    @property
    def endpoint(self) -> EndpointConfig:
        """Chat-completion settings bundled for the synthesis client."""
        return EndpointConfig(
            endpoint_url=self.endpoint_url,
            model_name=self.model_name,
            api_key=self.api_key,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout_seconds=self.timeout_seconds,
        )

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
