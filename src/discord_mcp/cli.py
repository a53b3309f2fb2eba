"""CLI for the discord-mcp server."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence
import argparse
import asyncio
import json
import sys

from dotenv import find_dotenv, load_dotenv

from discord_mcp import __version__
from discord_mcp.config.settings import (
    SettingsError,
    load_settings,
    resolve_env_secret,
    settings_summary,
)
from discord_mcp.discord.client import DiscordStartupError
from discord_mcp.runtime.app import run_runtime


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve Discord channel and message tools over MCP (stdio)."
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to JSON config file. Environment variables override file values.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate settings and print a redacted summary.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"discord-mcp {__version__}",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if environ is None:
        # A .env in the working directory fills in variables not already set.
        load_dotenv(find_dotenv(usecwd=True), override=False)

    try:
        settings = load_settings(config_path=args.config, environ=environ)
        if args.check:
            print(json.dumps(settings_summary(settings), indent=2, sort_keys=True))
            return 0
        resolve_env_secret(settings.discord.token_env, environ)
    except SettingsError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        asyncio.run(run_runtime(settings=settings))
    except DiscordStartupError as exc:
        print(f"Startup error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        # KeyboardInterrupt is expected during local runs.
        return 130

    return 0
