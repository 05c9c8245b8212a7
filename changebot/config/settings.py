"""Configuration management for Changebot."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Configuration settings for Changebot."""

    model_config = SettingsConfigDict(env_prefix="CHANGEBOT_", case_sensitive=False)

    openai_api_key: Optional[str] = None
    github_token: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    request_timeout: float = 60.0
    max_attempts: int = 3
    retry_delay: float = 0.0
    workers: int = 8

    @field_validator('openai_base_url')
    @classmethod
    def normalize_base_url(cls, v):
        """Ensure the chat endpoint base URL has a protocol and no trailing slash."""
        if v and not v.startswith(('http://', 'https://')):
            v = f"https://{v}"
        return v.rstrip('/')

    @field_validator('max_attempts', 'workers')
    @classmethod
    def at_least_one(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v


def load_json_config(config_path: str) -> dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to JSON configuration file

    Returns:
        Configuration dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Error loading config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    return data


def find_config_file() -> Optional[str]:
    """Find configuration file in common locations.

    Returns:
        Path to config file or None if not found
    """
    search_paths = [
        "changebot.json",
        ".changebot.json",
        "~/.changebot.json",
        "~/.config/changebot/config.json",
    ]

    for path_str in search_paths:
        path = Path(path_str).expanduser()
        if path.exists() and path.is_file():
            return str(path)

    return None


def get_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and/or JSON file.

    An explicitly requested config file must load; a discovered one is
    skipped when unreadable.

    Args:
        config_file: Optional path to JSON config file

    Returns:
        Configuration object
    """
    config_data = {}

    if config_file:
        config_data.update(load_json_config(config_file))
    else:
        discovered = find_config_file()
        if discovered:
            try:
                config_data.update(load_json_config(discovered))
            except ValueError:
                pass

    # Environment variables override JSON config
    env_config = {
        'openai_api_key': os.getenv('CHANGEBOT_OPENAI_API_KEY') or os.getenv('OPENAI_API_KEY'),
        'github_token': os.getenv('CHANGEBOT_GITHUB_TOKEN') or os.getenv('GITHUB_API_KEY'),
        'openai_base_url': os.getenv('CHANGEBOT_OPENAI_BASE_URL'),
        'model': os.getenv('CHANGEBOT_MODEL'),
        'request_timeout': os.getenv('CHANGEBOT_REQUEST_TIMEOUT'),
        'max_attempts': os.getenv('CHANGEBOT_MAX_ATTEMPTS'),
        'retry_delay': os.getenv('CHANGEBOT_RETRY_DELAY'),
        'workers': os.getenv('CHANGEBOT_WORKERS'),
    }

    env_config = {k: v for k, v in env_config.items() if v is not None}
    config_data.update(env_config)

    return Config(**config_data)
