from pathlib import Path

import config


def _point_config_at(tmp_path: Path, monkeypatch) -> Path:
    config_dir = tmp_path / ".passaporte"
    config_path = config_dir / "config.toml"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    for name in ("PASSAPORTE_HOST", "PASSAPORTE_PORT", "PASSAPORTE_CORS_ORIGINS", "DAILY_GOAL_MINUTES", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_path


def test_load_config_copies_example_when_missing(tmp_path, monkeypatch):
    config_path = _point_config_at(tmp_path, monkeypatch)

    loaded = config.load_config()

    assert config_path.exists()
    assert loaded["server"]["port"] == 3000
    assert loaded["reading"]["daily_goal_minutes"] == 15
    assert loaded["logging"]["level"] == "INFO"


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_path = _point_config_at(tmp_path, monkeypatch)
    config_path.parent.mkdir()
    config_path.write_text(
        "[server]\nport = 4000\n\n[reading]\ndaily_goal_minutes = 10\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PASSAPORTE_PORT", "5050")
    monkeypatch.setenv("DAILY_GOAL_MINUTES", "25")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    loaded = config.load_config()

    assert loaded["server"]["port"] == 5050
    assert loaded["reading"]["daily_goal_minutes"] == 25
    assert loaded["logging"]["level"] == "DEBUG"


def test_unknown_level_category_falls_back(tmp_path, monkeypatch):
    config_path = _point_config_at(tmp_path, monkeypatch)
    config_path.parent.mkdir()
    config_path.write_text('[reading]\ndefault_level_category = "pirates"\n', encoding="utf-8")

    assert config.get_config_value("reading", "default_level_category") == "EXPLORERS"


def test_cors_origins_never_creates_config(tmp_path, monkeypatch):
    config_path = _point_config_at(tmp_path, monkeypatch)

    assert config.cors_origins() == config.DEFAULT_CORS_ORIGINS
    assert not config_path.exists()

    monkeypatch.setenv("PASSAPORTE_CORS_ORIGINS", "http://a.test, http://b.test,")
    assert config.cors_origins() == ["http://a.test", "http://b.test"]
