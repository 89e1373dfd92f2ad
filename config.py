import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".passaporte"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_CORS_ORIGINS = ["http://localhost:5175"]
LEVEL_CATEGORY_CODES = ("MAGIC", "EXPLORERS", "KNIGHTS", "SPACE")


def _split_origins(value: Any) -> List[str]:
    if isinstance(value, str):
        return [origin.strip() for origin in value.split(",") if origin.strip()]
    return [str(origin).strip() for origin in value or [] if str(origin).strip()]


def load_config() -> Dict[str, Any]:
    """Load config from ~/.passaporte/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # .env overrides, e.g. PASSAPORTE_PORT
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    server_cfg = config.get("server", {})
    cors_env = os.getenv("PASSAPORTE_CORS_ORIGINS")
    config["server"] = {
        "host": os.getenv("PASSAPORTE_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": int(os.getenv("PASSAPORTE_PORT", server_cfg.get("port", 3000))),
        "cors_origins": _split_origins(
            cors_env if cors_env is not None else server_cfg.get("cors_origins", DEFAULT_CORS_ORIGINS)
        ),
    }

    reading_cfg = config.get("reading", {})
    category = str(reading_cfg.get("default_level_category", "EXPLORERS")).upper()
    if category not in LEVEL_CATEGORY_CODES:
        category = "EXPLORERS"
    config["reading"] = {
        "daily_goal_minutes": int(os.getenv(
            "DAILY_GOAL_MINUTES",
            reading_cfg.get("daily_goal_minutes", 15),
        )),
        "default_level_category": category,
    }

    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('reading', 'daily_goal_minutes')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value


def cors_origins() -> List[str]:
    """Allowed SPA origins, read without creating a config file."""
    env_value = os.getenv("PASSAPORTE_CORS_ORIGINS")
    if env_value is not None:
        return _split_origins(env_value)
    if CONFIG_PATH.exists():
        return load_config()["server"]["cors_origins"]
    return list(DEFAULT_CORS_ORIGINS)
