"""Configuration loader for storage, extraction, proxy, and UI settings."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass(frozen=True)
class StoreConfig:
    path: str
    policies_key: str
    theme_key: str


@dataclass(frozen=True)
class ExtractionConfig:
    endpoint: str
    timeout_seconds: float


@dataclass(frozen=True)
class ProxyConfig:
    host: str
    port: int
    api_key_env: str
    model: str


@dataclass(frozen=True)
class UiConfig:
    page_size: int
    toast_seconds: float
    default_theme: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    retention_days: int


@dataclass(frozen=True)
class AppConfig:
    store: StoreConfig
    extraction: ExtractionConfig
    proxy: ProxyConfig
    ui: UiConfig
    logging: LoggingConfig


DEFAULT_CONFIG_REL_PATH = Path("config/portal.yaml")
CONFIG_PATH_ENV = "POLICY_PORTAL_CONFIG_PATH"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"
RUNTIME_ENV_REL_PATH = Path("config/runtime.env")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_RUNTIME_ENV_LOADED = False


def _split_key_value(raw_line: str) -> tuple[str, str] | None:
    """Parse a shell or PowerShell key assignment line."""
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None

    if line.startswith("$env:"):
        line = line[len("$env:") :]
    elif line.startswith("export "):
        line = line[len("export ") :]

    if "=" not in line:
        return None

    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None

    if (value.startswith("'") and value.endswith("'")) or (
        value.startswith('"') and value.endswith('"')
    ):
        value = value[1:-1]

    return key, value


def _project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[3]


def _iter_env_candidates() -> list[Path]:
    """Return candidate files that may contain runtime secrets."""
    roots: list[Path] = [Path.cwd(), _project_root()]

    paths: list[Path] = []
    for root in roots:
        paths.extend(
            [
                root / ".env.local",
                root / ".env.local.ps1",
                root / RUNTIME_ENV_REL_PATH,
            ]
        )

    unique: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        unique.append(resolved)
    return unique


def _load_env_from_file(path: Path) -> None:
    """Load KEY=VALUE lines from a local file into process environment."""
    if not path.exists() or not path.is_file():
        return
    with path.open("r", encoding="utf-8") as file:
        for line in file:
            parsed = _split_key_value(line)
            if not parsed:
                continue
            key, value = parsed
            if key and key not in os.environ:
                os.environ[key] = value


def _ensure_runtime_env_loaded() -> None:
    """Load local env files once per process."""
    global _RUNTIME_ENV_LOADED
    if _RUNTIME_ENV_LOADED:
        return
    for path in _iter_env_candidates():
        _load_env_from_file(path)
    _RUNTIME_ENV_LOADED = True


def resolve_default_config_path() -> Path:
    """Resolve configuration path for source and packaged execution."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates = [
        Path.cwd() / DEFAULT_CONFIG_REL_PATH,
        _project_root() / DEFAULT_CONFIG_REL_PATH,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML."""
    path = config_path or resolve_default_config_path()
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}

    store = raw.get("store", {})
    extraction = raw.get("extraction", {})
    proxy = raw.get("proxy", {})
    ui = raw.get("ui", {})
    log = raw.get("logging", {})

    return AppConfig(
        store=StoreConfig(
            path=str(store["path"]),
            policies_key=str(store.get("policies_key", "mswasth-policies")),
            theme_key=str(store.get("theme_key", "mswasth-theme")),
        ),
        extraction=ExtractionConfig(
            endpoint=str(extraction["endpoint"]),
            timeout_seconds=float(extraction.get("timeout_seconds", 60)),
        ),
        proxy=ProxyConfig(
            host=str(proxy.get("host", "127.0.0.1")),
            port=int(proxy.get("port", 8787)),
            api_key_env=str(proxy.get("api_key_env", DEFAULT_API_KEY_ENV)),
            model=str(proxy.get("model", "gemini-2.5-flash")),
        ),
        ui=UiConfig(
            page_size=int(ui.get("page_size", 10)),
            toast_seconds=float(ui.get("toast_seconds", 4)),
            default_theme=str(ui.get("default_theme", "light")),
        ),
        logging=LoggingConfig(
            level=str(log.get("level", "INFO")).upper(),
            retention_days=int(log.get("retention_days", 1095)),
        ),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the running process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def get_optional_env(name: str) -> str | None:
    """Return an environment value after loading local env files."""
    _ensure_runtime_env_loaded()
    return os.getenv(name) or None


def get_required_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    value = get_optional_env(name)
    if not value:
        raise RuntimeError(f"Required environment variable is missing: {name}")
    return value
