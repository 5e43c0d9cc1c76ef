"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from searchbot.config.schema import Config

DEFAULT_BASE_URLS = {
    "google": "https://www.google.com/search",
    "ddg": "https://duckduckgo.com/",
    "serper": "https://google.serper.dev/search",
}


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".searchbot" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Values from the file sit below ``SEARCHBOT_*`` environment variables.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            data = _migrate_config(data)
            return Config(**_file_values(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to load config from {}: {}", path, e)
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _file_values(data: dict) -> dict[str, Any]:
    """Validate each file section and keep only the fields the file sets."""
    values: dict[str, Any] = {}
    for name, field in Config.model_fields.items():
        if name in data:
            section = field.annotation.model_validate(data[name])
            values[name] = section.model_dump(exclude_unset=True)
    return values


def _get(cfg: dict, camel: str, snake: str) -> Any:
    return cfg.get(camel) if cfg.get(camel) is not None else cfg.get(snake)


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    search_cfg = data.setdefault("search", {})
    providers_cfg = search_cfg.setdefault("providers", {})

    # Move legacy top-level userAgent -> search.userAgent
    legacy_user_agent = data.pop("userAgent", None)
    if legacy_user_agent and not _get(search_cfg, "userAgent", "user_agent"):
        search_cfg["userAgent"] = legacy_user_agent

    # Move legacy search.googleSkipBlocks -> search.providers.google.skipBlocks
    legacy_skip = search_cfg.pop("googleSkipBlocks", None)
    if legacy_skip is not None:
        google_cfg = providers_cfg.setdefault("google", {})
        if _get(google_cfg, "skipBlocks", "skip_blocks") is None:
            google_cfg["skipBlocks"] = legacy_skip

    # Move legacy search.serperApiKey -> search.providers.serper.apiKey
    legacy_api_key = search_cfg.pop("serperApiKey", None)
    if legacy_api_key:
        serper_cfg = providers_cfg.setdefault("serper", {})
        if not _get(serper_cfg, "apiKey", "api_key"):
            serper_cfg["apiKey"] = legacy_api_key

    # "duckduckgo" was accepted as the provider section name before "ddg"
    legacy_ddg = providers_cfg.pop("duckduckgo", None)
    if legacy_ddg and "ddg" not in providers_cfg:
        providers_cfg["ddg"] = legacy_ddg

    # Fill default provider base URLs when missing/empty
    for name, base_url in DEFAULT_BASE_URLS.items():
        provider_cfg = providers_cfg.setdefault(name, {})
        if not _get(provider_cfg, "baseUrl", "base_url"):
            provider_cfg.pop("base_url", None)
            provider_cfg["baseUrl"] = base_url

    return data
