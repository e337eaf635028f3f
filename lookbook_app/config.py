"""Configuration helpers for the lookbook composer."""

from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import List, Optional

from models.taxonomy import DEFAULT_CURRENCY, SHORTLIST_LIMIT

DEFAULT_RANKER_MODEL = "gemini-2.0-flash"
DEFAULT_RENDER_MODEL = "gemini-3-pro-image-preview"
DEFAULT_PLACEHOLDER_IMAGE = "https://picsum.photos/seed/fallback-look/720/1280"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


@dataclass
class LookbookConfig:
    """Configuration values for a lookbook composer deployment.

    Model names, catalog sources and the engine limits are resolved once at
    startup; the composition engine itself only reads ``currency``,
    ``shortlist_limit`` and ``target_look_count``.
    """

    api_key: Optional[str] = None
    ranker_model: str = DEFAULT_RANKER_MODEL
    render_model: str = DEFAULT_RENDER_MODEL
    ranker_enabled: bool = True
    render_enabled: bool = True
    target_look_count: int = 5
    currency: str = DEFAULT_CURRENCY
    shortlist_limit: int = SHORTLIST_LIMIT
    catalog_paths: List[str] = field(default_factory=list)
    catalog_urls: List[str] = field(default_factory=list)
    request_timeout_seconds: float = 10.0
    placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "LookbookConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that the Gemini
        key can be injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("LOOKBOOK_CONFIG_DIR", "config/environments"))
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

        return cls(
            api_key=get_value("google_api_key"),
            ranker_model=str(get_value("ranker_model") or DEFAULT_RANKER_MODEL),
            render_model=str(get_value("render_model") or DEFAULT_RENDER_MODEL),
            ranker_enabled=_as_bool(get_value("ranker_enabled"), True),
            render_enabled=_as_bool(get_value("render_enabled"), True),
            target_look_count=int(get_value("target_look_count") or 5),
            currency=str(get_value("currency") or DEFAULT_CURRENCY).upper(),
            shortlist_limit=int(get_value("shortlist_limit") or SHORTLIST_LIMIT),
            catalog_paths=_as_list(get_value("catalog_paths")),
            catalog_urls=_as_list(get_value("catalog_urls")),
            request_timeout_seconds=float(get_value("request_timeout_seconds") or 10.0),
            placeholder_image_url=str(get_value("placeholder_image_url") or DEFAULT_PLACEHOLDER_IMAGE),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

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
