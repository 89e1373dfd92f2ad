from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import config
from db import database
from main import app

CONFIG_ENV_VARS = (
    "PASSAPORTE_HOST",
    "PASSAPORTE_PORT",
    "PASSAPORTE_CORS_ORIGINS",
    "DAILY_GOAL_MINUTES",
    "LOG_LEVEL",
)


def write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[server]",
                "port = 3000",
                "",
                "[reading]",
                "daily_goal_minutes = 20",
                "default_level_category = \"EXPLORERS\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_dir = tmp_path / ".passaporte"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    write_test_config(config_path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "passaporte.db")
    return config_dir


@pytest.fixture
def db_ready(config_dir):
    database.init_db()
    return config_dir


@pytest.fixture
def client(db_ready):
    return TestClient(app)


@pytest.fixture
def family_id(client):
    response = client.post("/api/family", json={"name": "Silva", "email": "silva@example.com"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def child_id(client, family_id):
    response = client.post("/api/children", json={"family_id": family_id, "name": "Inês"})
    assert response.status_code == 201
    return response.json()["id"]
