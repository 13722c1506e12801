"""Configuration helpers for the ChronoWear service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
# Tokyo, used whenever the caller's position cannot be resolved.
DEFAULT_LATITUDE = 35.6764225
DEFAULT_LONGITUDE = 139.650027


@dataclass
class ChronoWearConfig:
    """Configuration values for the ChronoWear service.

    Secrets (API keys) are expected to come from the runtime environment while
    the non-secret defaults can live in an environment YAML file.
    """

    model: str = DEFAULT_GEMINI_MODEL
    gemini_api_key: Optional[str] = None
    functions_base_url: Optional[str] = None
    functions_api_key: Optional[str] = None
    unsplash_access_key: Optional[str] = None
    picks_db_path: str = "data/daily_picks.db"
    wardrobe_db_path: str = "data/wardrobe.db"
    default_latitude: float = DEFAULT_LATITUDE
    default_longitude: float = DEFAULT_LONGITUDE
    geolocation_timeout_seconds: float = 8.0
    http_timeout_seconds: float = 30.0
    temperature_unit: str = "fahrenheit"
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "ChronoWearConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables, which take precedence.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("CHRONOWEAR_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        def get_float(key: str, default: float) -> float:
            raw = get_value(key)
            if raw in (None, ""):
                return default
            try:
                return float(raw)
            except ValueError as exc:
                raise ValueError(f"Config value {key}={raw!r} is not a number") from exc

        return cls(
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            gemini_api_key=get_value("gemini_api_key"),
            functions_base_url=get_value("functions_base_url"),
            functions_api_key=get_value("functions_api_key"),
            unsplash_access_key=get_value("unsplash_access_key"),
            picks_db_path=str(get_value("picks_db_path", "data/daily_picks.db")),
            wardrobe_db_path=str(get_value("wardrobe_db_path", "data/wardrobe.db")),
            default_latitude=get_float("default_latitude", DEFAULT_LATITUDE),
            default_longitude=get_float("default_longitude", DEFAULT_LONGITUDE),
            geolocation_timeout_seconds=get_float("geolocation_timeout_seconds", 8.0),
            http_timeout_seconds=get_float("http_timeout_seconds", 30.0),
            temperature_unit=str(get_value("temperature_unit", "fahrenheit") or "fahrenheit"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal flat ``key: value`` YAML file."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
