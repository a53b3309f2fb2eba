"""MCP server exposing the tool dispatcher over stdio."""

from __future__ import annotations

from typing import Any, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from discord_mcp import __version__
from discord_mcp.tools.dispatch import ToolDispatcher


class ToolCallFailed(RuntimeError):
    """Signals an error result to the MCP SDK; the message is the caller-facing text."""


def build_server(dispatcher: ToolDispatcher, *, name: str = "discord") -> Server:
    server = Server(name, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.input_schema(),
            )
            for spec in dispatcher.tools()
        ]

    # Arguments are validated by the dispatcher's pydantic models only.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
        result = await dispatcher.call(name, arguments)
        if result.is_error:
            raise ToolCallFailed(result.content)
        return [types.TextContent(type="text", text=result.content)]

    return server


async def serve_stdio(server: Server) -> None:
    """Serve MCP requests on stdin/stdout until the client disconnects."""

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
