from __future__ import annotations

from pathlib import Path

import pytest

from policy_portal.core import config as app_config


def test_get_required_env_loads_from_local_env_file(monkeypatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env.local"
    env_file.write_text(
        "# local secrets\nexport GEMINI_API_KEY='key-from-file'\n$env:OTHER_SETTING=\"other\"\n",
        encoding="utf-8",
    )

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OTHER_SETTING", raising=False)
    monkeypatch.setattr(app_config, "_RUNTIME_ENV_LOADED", False)
    monkeypatch.setattr(app_config, "_iter_env_candidates", lambda: [env_file])

    assert app_config.get_required_env("GEMINI_API_KEY") == "key-from-file"
    assert app_config.get_optional_env("OTHER_SETTING") == "other"


def test_existing_environment_wins_over_env_file(monkeypatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env.local"
    env_file.write_text("GEMINI_API_KEY=from-file\n", encoding="utf-8")

    monkeypatch.setenv("GEMINI_API_KEY", "from-process")
    monkeypatch.setattr(app_config, "_RUNTIME_ENV_LOADED", False)
    monkeypatch.setattr(app_config, "_iter_env_candidates", lambda: [env_file])

    assert app_config.get_required_env("GEMINI_API_KEY") == "from-process"


def test_get_required_env_raises_when_missing(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(app_config, "_RUNTIME_ENV_LOADED", False)
    monkeypatch.setattr(app_config, "_iter_env_candidates", lambda: [])

    assert app_config.get_optional_env("GEMINI_API_KEY") is None
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        app_config.get_required_env("GEMINI_API_KEY")


def test_load_config_reads_yaml_with_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "portal.yaml"
    config_file.write_text(
        "store:\n"
        "  path: data/test.db\n"
        "extraction:\n"
        "  endpoint: http://localhost:9000/extract\n"
        "ui:\n"
        "  page_size: 25\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )

    config = app_config.load_config(config_file)

    assert config.store.path == "data/test.db"
    assert config.store.policies_key == "mswasth-policies"
    assert config.store.theme_key == "mswasth-theme"
    assert config.extraction.endpoint == "http://localhost:9000/extract"
    assert config.extraction.timeout_seconds == 60
    assert config.proxy.api_key_env == "GEMINI_API_KEY"
    assert config.ui.page_size == 25
    assert config.ui.default_theme == "light"
    assert config.logging.level == "DEBUG"
    assert config.logging.retention_days == 1095


def test_config_path_env_override(monkeypatch, tmp_path: Path) -> None:
    target = tmp_path / "custom.yaml"
    monkeypatch.setenv("POLICY_PORTAL_CONFIG_PATH", str(target))

    assert app_config.resolve_default_config_path() == target


def test_bundled_config_loads() -> None:
    bundled = Path(__file__).resolve().parents[1] / "config" / "portal.yaml"
    config = app_config.load_config(bundled)

    assert config.ui.page_size == 10
    assert config.proxy.port == 8787
