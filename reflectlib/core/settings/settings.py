"""Settings and configuration management.

This module provides environment-driven configuration for reflectlib:
global logging settings, reflection policy defaults and LLM defaults.
Values are read from environment variables (and an optional ``.env``
file) and can be overridden from a YAML or JSON configuration file.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from reflectlib.agent.components.reflection.models import ReflectionPolicy

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReflectlibSettings(BaseSettings):
    """Base settings for reflectlib with environment variable support."""

    environment: str = Field(default="development", validation_alias=AliasChoices("REFLECTLIB_ENV", "environment"))
    debug: bool = Field(default=False, validation_alias=AliasChoices("REFLECTLIB_DEBUG", "debug"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("REFLECTLIB_LOG_LEVEL", "log_level"))
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, validation_alias=AliasChoices("REFLECTLIB_LOG_FORMAT", "log_format"))

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ReflectionSettings(BaseSettings):
    """Reflection policy defaults.

    Bounds are not checked here; ``to_policy`` builds a ``ReflectionPolicy``
    which rejects invalid combinations.
    """

    enabled: bool = Field(default=True, validation_alias=AliasChoices("REFLECTION_ENABLED", "enabled"))
    max_round: int = Field(default=3, validation_alias=AliasChoices("REFLECTION_MAX_ROUND", "max_round"))
    min_round: int = Field(default=1, validation_alias=AliasChoices("REFLECTION_MIN_ROUND", "min_round"))
    evaluation_criteria: Optional[str] = Field(default=None, validation_alias=AliasChoices("REFLECTION_EVALUATION_CRITERIA", "evaluation_criteria"))
    prompt_template: Optional[str] = Field(default=None, validation_alias=AliasChoices("REFLECTION_PROMPT_TEMPLATE", "prompt_template"))
    require_well_formed: bool = Field(default=False, validation_alias=AliasChoices("REFLECTION_REQUIRE_WELL_FORMED", "require_well_formed"))

    model_config = SettingsConfigDict(env_prefix="REFLECTION_", extra="ignore")

    def to_policy(self) -> "ReflectionPolicy":
        """Build an immutable reflection policy from these settings."""
        from reflectlib.agent.components.reflection.models import ReflectionPolicy
        from reflectlib.agent.components.reflection.prompts import (
            DEFAULT_REFLECTION_TEMPLATE,
            DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE,
        )

        default_template = DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE if self.evaluation_criteria else DEFAULT_REFLECTION_TEMPLATE
        return ReflectionPolicy(
            enabled=self.enabled,
            max_round=self.max_round,
            min_round=self.min_round,
            evaluator_prompt_template=self.prompt_template or default_template,
            evaluation_criteria=self.evaluation_criteria,
            require_well_formed=self.require_well_formed,
        )


class LLMSettings(BaseSettings):
    """LLM defaults used when building agents."""

    model_name: str = Field(default="default", validation_alias=AliasChoices("LLM_MODEL_NAME", "model_name"))
    temperature: float = Field(default=0.7, validation_alias=AliasChoices("LLM_TEMPERATURE", "temperature"))

    model_config = SettingsConfigDict(env_prefix="LLM_", extra="ignore", protected_namespaces=())

    @field_validator('temperature')
    @classmethod
    def validate_temperature(cls, v):
        """Validate temperature range."""
        if not (0.0 <= v <= 2.0):
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v


class SettingsBundle:
    """The three settings sections loaded together."""

    def __init__(
        self,
        reflectlib: Optional[ReflectlibSettings] = None,
        reflection: Optional[ReflectionSettings] = None,
        llm: Optional[LLMSettings] = None,
    ):
        self.reflectlib = reflectlib or ReflectlibSettings()
        self.reflection = reflection or ReflectionSettings()
        self.llm = llm or LLMSettings()

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Export all settings as a nested dictionary."""
        return {
            "reflectlib": self.reflectlib.model_dump(),
            "reflection": self.reflection.model_dump(),
            "llm": self.llm.model_dump(),
        }


def load_settings_file(path: Path) -> SettingsBundle:
    """Load settings sections from a YAML or JSON file.

    Sections missing from the file fall back to environment/defaults.

    Args:
        path: Path to a ``.yml``, ``.yaml`` or ``.json`` file

    Returns:
        Loaded settings bundle

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not contain a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yml', '.yaml']:
            config_data = yaml.safe_load(f) or {}
        else:
            config_data = json.load(f)

    if not isinstance(config_data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, got {type(config_data).__name__}")

    logger.info(f"Loaded settings from {path} (sections: {sorted(config_data.keys())})")
    return SettingsBundle(
        reflectlib=ReflectlibSettings(**config_data.get("reflectlib", {})),
        reflection=ReflectionSettings(**config_data.get("reflection", {})),
        llm=LLMSettings(**config_data.get("llm", {})),
    )


def configure_logging(settings: Optional[ReflectlibSettings] = None) -> None:
    """Apply logging configuration for applications embedding reflectlib.

    The library never configures handlers on import; call this from an
    application entry point.
    """
    settings = settings or ReflectlibSettings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=settings.log_format)
    logger.debug(f"Logging configured at {logging.getLevelName(level)} for {settings.environment}")
