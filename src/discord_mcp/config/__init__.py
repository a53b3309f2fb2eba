"""Configuration APIs."""

from discord_mcp.config.settings import (
    AppSettings,
    DiscordSettings,
    MissingCredentialError,
    RuntimeSettings,
    ScanSettings,
    ServerSettings,
    SettingsError,
    load_settings,
    resolve_env_secret,
    settings_summary,
)

__all__ = [
    "AppSettings",
    "DiscordSettings",
    "MissingCredentialError",
    "RuntimeSettings",
    "ScanSettings",
    "ServerSettings",
    "SettingsError",
    "load_settings",
    "resolve_env_secret",
    "settings_summary",
]
