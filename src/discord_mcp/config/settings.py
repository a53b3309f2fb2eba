"""Typed settings loader for discord-mcp."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple
import json
import os


_MISSING = object()
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or validated."""


class MissingCredentialError(SettingsError):
    """Raised when the bot token environment variable is absent or empty."""


@dataclass(frozen=True)
class DiscordSettings:
    token_env: str = "DISCORD_TOKEN"
    ready_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        token_env = self.token_env.strip()
        if not token_env:
            raise SettingsError("discord.token_env cannot be empty.")

        if self.ready_timeout_seconds <= 0:
            raise SettingsError("discord.ready_timeout_seconds must be > 0.")

        object.__setattr__(self, "token_env", token_env)


@dataclass(frozen=True)
class ServerSettings:
    name: str = "discord"

    def __post_init__(self) -> None:
        name = self.name.strip()
        if not name:
            raise SettingsError("server.name cannot be empty.")

        object.__setattr__(self, "name", name)


@dataclass(frozen=True)
class ScanSettings:
    concurrency: int = 1

    def __post_init__(self) -> None:
        if self.concurrency <= 0:
            raise SettingsError("scan.concurrency must be a positive integer.")


@dataclass(frozen=True)
class RuntimeSettings:
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        log_level = self.log_level.strip().upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise SettingsError(
                "runtime.log_level must be one of: " + ", ".join(sorted(_VALID_LOG_LEVELS))
            )

        object.__setattr__(self, "log_level", log_level)


@dataclass(frozen=True)
class AppSettings:
    discord: DiscordSettings
    server: ServerSettings
    scan: ScanSettings
    runtime: RuntimeSettings


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """Load validated settings from JSON config and environment overrides."""

    env = dict(environ) if environ is not None else dict(os.environ)
    config = _load_config(config_path)

    discord = DiscordSettings(
        token_env=_read_value(
            config,
            env,
            section="discord",
            key="token_env",
            env_key="DISCORD_MCP_DISCORD_TOKEN_ENV",
            caster=_as_str,
            default="DISCORD_TOKEN",
        ),
        ready_timeout_seconds=_read_value(
            config,
            env,
            section="discord",
            key="ready_timeout_seconds",
            env_key="DISCORD_MCP_DISCORD_READY_TIMEOUT_SECONDS",
            caster=_as_float,
            default=30.0,
        ),
    )

    server = ServerSettings(
        name=_read_value(
            config,
            env,
            section="server",
            key="name",
            env_key="DISCORD_MCP_SERVER_NAME",
            caster=_as_str,
            default="discord",
        ),
    )

    scan = ScanSettings(
        concurrency=_read_value(
            config,
            env,
            section="scan",
            key="concurrency",
            env_key="DISCORD_MCP_SCAN_CONCURRENCY",
            caster=_as_int,
            default=1,
        ),
    )

    runtime = RuntimeSettings(
        log_level=_read_value(
            config,
            env,
            section="runtime",
            key="log_level",
            env_key="DISCORD_MCP_RUNTIME_LOG_LEVEL",
            caster=_as_str,
            default="INFO",
        ),
    )

    return AppSettings(
        discord=discord,
        server=server,
        scan=scan,
        runtime=runtime,
    )


def resolve_env_secret(env_name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve a secret value from environment by indirection key."""

    env = environ if environ is not None else os.environ
    value = env.get(env_name)
    if value is None:
        raise MissingCredentialError(
            f"Required secret environment variable '{env_name}' is not set."
        )

    if not value.strip():
        raise MissingCredentialError(f"Secret environment variable '{env_name}' cannot be empty.")

    return value


def settings_summary(settings: AppSettings) -> dict:
    """Render redacted settings for diagnostics."""

    return {
        "discord": {
            "token_env": settings.discord.token_env,
            "ready_timeout_seconds": settings.discord.ready_timeout_seconds,
        },
        "server": {
            "name": settings.server.name,
        },
        "scan": {
            "concurrency": settings.scan.concurrency,
        },
        "runtime": {
            "log_level": settings.runtime.log_level,
        },
    }


def _load_config(config_path: Optional[Path]) -> Mapping[str, Any]:
    if config_path is None:
        return {}

    resolved = config_path.expanduser()
    if not resolved.exists():
        raise SettingsError(f"Config file does not exist: {resolved}")

    try:
        with resolved.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Config file is not valid JSON: {resolved}") from exc

    if not isinstance(loaded, dict):
        raise SettingsError("Config root must be an object.")

    return loaded


def _read_value(
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    *,
    section: str,
    key: str,
    env_key: str,
    caster: Callable[[Any], Any],
    default: Any = _MISSING,
) -> Any:
    raw_value, source = _resolve_raw_value(
        config=config,
        environ=environ,
        section=section,
        key=key,
        env_key=env_key,
        default=default,
    )

    try:
        return caster(raw_value)
    except SettingsError as exc:
        raise SettingsError(
            f"Invalid value for {section}.{key} from {source}: {exc}"
        ) from exc
    except Exception as exc:
        raise SettingsError(
            f"Invalid value for {section}.{key} from {source}: {raw_value!r}"
        ) from exc


def _resolve_raw_value(
    *,
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    section: str,
    key: str,
    env_key: str,
    default: Any,
) -> Tuple[Any, str]:
    env_value = environ.get(env_key)
    if env_value not in (None, ""):
        return env_value, "environment"

    section_map = config.get(section)
    if section_map is not None and not isinstance(section_map, Mapping):
        raise SettingsError(f"Config section '{section}' must be an object.")

    if isinstance(section_map, Mapping) and key in section_map:
        return section_map[key], "config"

    if default is not _MISSING:
        return default, "default"

    raise SettingsError(
        f"Missing required setting '{section}.{key}'. "
        f"Provide it in config or via '{env_key}'."
    )


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise SettingsError("Value cannot be empty.")
        return text

    raise SettingsError("Expected string value.")


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid integer value.")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        return int(value.strip())

    raise SettingsError("Expected integer value.")


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid float value.")

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, str):
        return float(value.strip())

    raise SettingsError("Expected float value.")
