"""Process-wide defaults for validators.

Settings are resolved with the following precedence (lowest first):

1. Built-in defaults (:attr:`ValidatorSettings.DEFAULTS`).
2. A dictionary passed to :func:`configure` or a YAML/JSON file passed to
   :func:`load_settings`.
3. Environment variables named ``FLUENT_VALIDATOR_<SETTING>``, e.g.
   ``FLUENT_VALIDATOR_ESCAPE_HTML=false``.

Example:
    ```python
    from fluent_validator import configure, load_settings

    configure(escape_html=False)
    load_settings("validator.yaml")
    ```
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
]


class ValidatorSettings:
    """Holds validator defaults and loads them from files and the environment.

    Settings:
        - default_message: Template used when a check is called without an
          error message. ``{check}`` is replaced with the check name.
        - escape_html: Whether ``clean_string`` HTML-escapes its result.
        - date_formats: ``strptime`` formats tried by ``is_date`` before ISO-8601.
        - log_failures: Whether failed checks are logged at DEBUG level.
    """

    DEFAULTS: Dict[str, Any] = {
        "default_message": "Validation failed: {check}",
        "escape_html": True,
        "date_formats": DEFAULT_DATE_FORMATS,
        "log_failures": True,
    }

    ENV_PREFIX = "FLUENT_VALIDATOR_"

    def __init__(self, settings: Mapping[str, Any] | None = None) -> None:
        """Initialize with defaults, then apply ``settings`` on top.

        Args:
            settings: Optional overrides

        Raises:
            ConfigurationError: If a key is unknown or a value has the wrong type
        """
        self._settings: Dict[str, Any] = copy.deepcopy(self.DEFAULTS)
        if settings:
            self.update(settings)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ValidatorSettings":
        """Create settings from a YAML or JSON file.

        Args:
            path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

        Returns:
            ValidatorSettings instance
        """
        settings = cls()
        settings.load_file(path)
        return settings

    def load_file(self, path: Union[str, Path]) -> None:
        """Merge settings from a YAML or JSON file.

        Args:
            path: Path to the settings file

        Raises:
            ConfigurationError: If the file is missing, has an unsupported
                format or contains invalid settings
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigurationError(
                f"Settings file not found: {path}", context={"path": str(path)}
            )

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported settings file format: {suffix}",
                    context={"path": str(path)},
                )

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file must contain a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )

        logger.debug(f"Loading validator settings from {path}")
        self.update(data)

    def apply_environment(self, environ: Mapping[str, str] | None = None) -> None:
        """Apply ``FLUENT_VALIDATOR_*`` overrides.

        Unknown or unparseable variables are skipped with a warning.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
        """
        environ = os.environ if environ is None else environ

        for env_var, raw in environ.items():
            if not env_var.startswith(self.ENV_PREFIX):
                continue
            key = env_var[len(self.ENV_PREFIX):].lower()
            if key not in self.DEFAULTS:
                logger.warning(f"Ignoring unknown validator setting {env_var}")
                continue
            try:
                self.set(key, self._parse_value(key, raw))
            except ConfigurationError as e:
                logger.warning(f"Ignoring {env_var}: {e}")

    def _parse_value(self, key: str, value: str) -> Any:
        """Cast an environment string to the type of the setting's default."""
        default = self.DEFAULTS[key]
        if isinstance(default, bool):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "1", "on"):
                return True
            elif lowered in ("false", "no", "0", "off"):
                return False
            raise ConfigurationError(
                f"Invalid boolean value: {value!r}", context={"key": key}
            )
        elif isinstance(default, list):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    def update(self, settings: Mapping[str, Any]) -> None:
        """Set several settings at once.

        Either every setting is applied or, if one is invalid, none is.

        Args:
            settings: Mapping of setting names to values

        Raises:
            ConfigurationError: If a key is unknown or a value has the wrong type
        """
        staged = dict(self._settings)
        for key, value in settings.items():
            self._check(key, value)
            staged[key] = copy.deepcopy(value)
        self._settings = staged

    def set(self, key: str, value: Any) -> None:
        """Set a single setting.

        Raises:
            ConfigurationError: If the key is unknown or the value has the
                wrong type
        """
        self._check(key, value)
        self._settings[key] = copy.deepcopy(value)

    def _check(self, key: str, value: Any) -> None:
        if key not in self.DEFAULTS:
            raise ConfigurationError(
                f"Unknown validator setting: {key}",
                context={"key": key, "available_keys": sorted(self.DEFAULTS)},
            )

        expected = type(self.DEFAULTS[key])
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"Setting '{key}' expects {expected.__name__}, got {type(value).__name__}",
                context={"key": key},
            )

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    @property
    def default_message(self) -> str:
        return self._settings["default_message"]

    @property
    def escape_html(self) -> bool:
        return self._settings["escape_html"]

    @property
    def date_formats(self) -> list[str]:
        return self._settings["date_formats"]

    @property
    def log_failures(self) -> bool:
        return self._settings["log_failures"]

    def format_message(self, check: str) -> str:
        """Build the fallback error message for ``check``."""
        return self.default_message.replace("{check}", check)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._settings)

    def __repr__(self) -> str:
        return f"ValidatorSettings({self._settings})"


_settings: ValidatorSettings | None = None


def get_settings() -> ValidatorSettings:
    """Return the process-wide settings, creating them on first use.

    The first call applies environment overrides on top of the defaults.
    """
    global _settings
    if _settings is None:
        _settings = ValidatorSettings()
        _settings.apply_environment()
    return _settings


def configure(**overrides: Any) -> ValidatorSettings:
    """Override process-wide settings.

    Environment overrides are re-applied afterwards so they keep precedence.

    Example:
        ```python
        configure(escape_html=False, default_message="invalid ({check})")
        ```
    """
    settings = get_settings()
    settings.update(overrides)
    settings.apply_environment()
    return settings


def load_settings(path: Union[str, Path]) -> ValidatorSettings:
    """Merge a YAML/JSON settings file into the process-wide settings.

    Environment overrides are re-applied afterwards so they keep precedence.
    """
    settings = get_settings()
    settings.load_file(path)
    settings.apply_environment()
    return settings


def reset_settings() -> None:
    """Drop the process-wide settings; the next access rebuilds them."""
    global _settings
    _settings = None
