"""Tool surface: argument models, handlers, dispatch and the MCP server."""

from discord_mcp.tools.dispatch import (
    ToolDispatcher,
    ToolResult,
    ToolSpec,
    build_tool_specs,
    format_tool_error,
    render_payload,
)
from discord_mcp.tools.handlers import ToolHandlers, format_instant, forum_post_title
from discord_mcp.tools.schemas import (
    ListChannelsArgs,
    ListChannelsWithNewMessagesArgs,
    ReadMessagesArgs,
    SendMessageArgs,
    validate_arguments,
)

__all__ = [
    "ListChannelsArgs",
    "ListChannelsWithNewMessagesArgs",
    "ReadMessagesArgs",
    "SendMessageArgs",
    "ToolDispatcher",
    "ToolHandlers",
    "ToolResult",
    "ToolSpec",
    "build_tool_specs",
    "format_instant",
    "format_tool_error",
    "forum_post_title",
    "render_payload",
    "validate_arguments",
]
