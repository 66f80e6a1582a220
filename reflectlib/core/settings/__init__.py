"""Settings for reflectlib."""

from .settings import (
    LLMSettings,
    ReflectionSettings,
    ReflectlibSettings,
    SettingsBundle,
    configure_logging,
    load_settings_file,
)

__all__ = [
    "LLMSettings",
    "ReflectionSettings",
    "ReflectlibSettings",
    "SettingsBundle",
    "configure_logging",
    "load_settings_file",
]
