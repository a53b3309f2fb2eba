"""Identifier and time-window resolution."""

from discord_mcp.resolution.channels import ChannelResolver
from discord_mcp.resolution.guilds import GuildResolver
from discord_mcp.resolution.timewindow import (
    DISCORD_EPOCH_MS,
    cursor_to_instant,
    instant_to_cursor,
    parse_boundary,
    scan_cursor,
)

__all__ = [
    "ChannelResolver",
    "DISCORD_EPOCH_MS",
    "GuildResolver",
    "cursor_to_instant",
    "instant_to_cursor",
    "parse_boundary",
    "scan_cursor",
]
