"""
Configuration for sidekick.

Settings live in ``~/.sidekick/config.json``; the API key and the model can
be overridden from the environment.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .constants import (
    API_KEY_ENV,
    CONFIG_FILE,
    DEFAULT_MAX_HOPS,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SHELL_TIMEOUT,
    DEFAULT_SYSTEM_PROMPT,
    MODEL_ENV,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Model and conversation settings."""
    model: str = DEFAULT_MODEL
    system_prompt: Optional[str] = DEFAULT_SYSTEM_PROMPT
    max_hops: Optional[int] = DEFAULT_MAX_HOPS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class ShellConfig:
    """Command runner settings."""
    shell: Optional[str] = None
    timeout: Optional[float] = DEFAULT_SHELL_TIMEOUT


@dataclass
class UIConfig:
    """Rendering settings."""
    markdown_rendering: bool = True
    show_tool_notices: bool = True


@dataclass
class AppConfig:
    """Main application configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    api_key: Optional[str] = None


def _build_section(cls: type, name: str, values: Any) -> Any:
    """Instantiate a config section, ignoring keys it does not know."""
    if not isinstance(values, dict):
        raise TypeError(f"section '{name}' must be an object")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning("Ignoring unknown %s settings: %s", name, ", ".join(unknown))
    return cls(**{key: value for key, value in values.items() if key in known})


def normalize_max_hops(value: Any) -> Optional[int]:
    """
    Validate a hop limit setting.

    Returns:
        The limit, or None for no limit (given as 0 or null)

    Raises:
        ValueError: The value is not a non-negative integer or null
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"max_hops must be a non-negative integer or null, got {value!r}")
    return value or None


class ConfigManager:
    """
    Loads, holds and saves the application configuration.

    Environment variables take precedence over the file for the API key
    and the model. A missing file means defaults; a malformed one is
    reported and replaced by defaults unless ``strict`` is set.
    """

    def __init__(self, config_file: Optional[Path] = None, strict: bool = False) -> None:
        self._config_file = Path(config_file) if config_file else CONFIG_FILE
        self._strict = strict
        self._config = AppConfig()
        self.reload()

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def llm(self) -> LLMConfig:
        return self._config.llm

    @property
    def shell(self) -> ShellConfig:
        return self._config.shell

    @property
    def ui(self) -> UIConfig:
        return self._config.ui

    @property
    def api_key(self) -> Optional[str]:
        return self._config.api_key

    def reload(self) -> None:
        """Re-read the file and the environment, discarding in-memory changes."""
        self._config = self._read_file()
        self._apply_env()

    def _read_file(self) -> AppConfig:
        if not self._config_file.exists():
            if self._strict:
                raise ConfigError(f"Config file not found: {self._config_file}")
            return AppConfig()

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError("top-level value must be an object")

            config = AppConfig(api_key=data.get('api_key'))
            if 'llm' in data:
                config.llm = _build_section(LLMConfig, 'llm', data['llm'])
                config.llm.max_hops = self._checked_max_hops(config.llm.max_hops)
            if 'shell' in data:
                config.shell = _build_section(ShellConfig, 'shell', data['shell'])
            if 'ui' in data:
                config.ui = _build_section(UIConfig, 'ui', data['ui'])
            return config
        except (OSError, json.JSONDecodeError, TypeError) as e:
            if self._strict:
                raise ConfigError(f"Failed to load {self._config_file}: {e}") from e
            logger.warning("Failed to load config file %s: %s", self._config_file, e)
            return AppConfig()

    def _checked_max_hops(self, value: Any) -> Optional[int]:
        try:
            return normalize_max_hops(value)
        except ValueError as e:
            if self._strict:
                raise ConfigError(f"Invalid setting in {self._config_file}: {e}") from e
            logger.warning("%s; using the default of %s", e, DEFAULT_MAX_HOPS)
            return DEFAULT_MAX_HOPS

    def _apply_env(self) -> None:
        api_key = os.environ.get(API_KEY_ENV)
        if api_key:
            self._config.api_key = api_key

        model = os.environ.get(MODEL_ENV)
        if model:
            self._config.llm.model = model

    def set_api_key(self, value: str, persist: bool = False) -> None:
        """
        Set the API key.

        Args:
            value: The API key
            persist: Also write it to the config file
        """
        self._config.api_key = value
        if persist:
            self.save()

    def update_llm(self, **kwargs: Any) -> None:
        """Change LLM settings in memory; unknown names are ignored."""
        for key, value in kwargs.items():
            if hasattr(self._config.llm, key):
                setattr(self._config.llm, key, value)

    def save(self) -> None:
        """Write the configuration to the config file."""
        data = {
            'llm': asdict(self._config.llm),
            'shell': asdict(self._config.shell),
            'ui': asdict(self._config.ui),
        }
        # A key taken from the environment stays out of the file
        if self._config.api_key and not os.environ.get(API_KEY_ENV):
            data['api_key'] = self._config.api_key

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)


_config: Optional[ConfigManager] = None


def get_config(config_file: Optional[Path] = None, strict: bool = False) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path used only when the instance is first created
        strict: Raise ConfigError for a missing or malformed file (first call only)
    """
    global _config
    if _config is None:
        _config = ConfigManager(config_file, strict=strict)
    return _config
