"""Recent-activity scanning."""

from discord_mcp.activity.scanner import (
    FETCH_LIMIT,
    ActivityRecord,
    ActivityReport,
    ActivityScanner,
)

__all__ = [
    "FETCH_LIMIT",
    "ActivityRecord",
    "ActivityReport",
    "ActivityScanner",
]
