"""Tool name routing, argument validation and result rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Type
import json
import logging

from pydantic import BaseModel

from discord_mcp.errors import ToolError, UnknownToolError
from discord_mcp.tools.handlers import ToolHandlers
from discord_mcp.tools.schemas import (
    ListChannelsArgs,
    ListChannelsWithNewMessagesArgs,
    ReadMessagesArgs,
    SendMessageArgs,
    input_schema,
    validate_arguments,
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    arguments: Type[BaseModel]
    handler: Callable[[Any], Awaitable[Any]]

    def input_schema(self) -> dict[str, Any]:
        return input_schema(self.arguments)


@dataclass(frozen=True)
class ToolResult:
    content: str
    is_error: bool = False


def format_tool_error(exc: Exception) -> str:
    if isinstance(exc, ToolError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"


def render_payload(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def build_tool_specs(handlers: ToolHandlers) -> tuple[ToolSpec, ...]:
    return (
        ToolSpec(
            name="send-message",
            description=(
                "Send a message to a Discord channel. "
                "Sending to a forum channel creates a new post."
            ),
            arguments=SendMessageArgs,
            handler=handlers.send_message,
        ),
        ToolSpec(
            name="read-messages",
            description="Read recent messages from a Discord channel",
            arguments=ReadMessagesArgs,
            handler=handlers.read_messages,
        ),
        ToolSpec(
            name="list-channels",
            description="List all channels in a Discord server",
            arguments=ListChannelsArgs,
            handler=handlers.list_channels,
        ),
        ToolSpec(
            name="list-channels-with-new-messages",
            description=(
                "List all channels that have new messages since a specific time, "
                "including message count"
            ),
            arguments=ListChannelsWithNewMessagesArgs,
            handler=handlers.list_channels_with_new_messages,
        ),
    )


class ToolDispatcher:
    """Routes tool calls to handlers and turns every outcome into a text result."""

    def __init__(self, handlers: ToolHandlers, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("discord_mcp.tools.dispatch")
        self._specs = {spec.name: spec for spec in build_tool_specs(handlers)}

    def tools(self) -> tuple[ToolSpec, ...]:
        return tuple(self._specs.values())

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        try:
            spec = self._specs.get(name)
            if spec is None:
                raise UnknownToolError(f"Unknown tool: {name}")
            args = validate_arguments(spec.arguments, arguments)
            payload = await spec.handler(args)
        except ToolError as exc:
            self._logger.info("Tool %s rejected: %s", name, exc)
            return ToolResult(content=format_tool_error(exc), is_error=True)
        except Exception as exc:
            self._logger.exception("Tool %s failed", name)
            return ToolResult(content=format_tool_error(exc), is_error=True)

        return ToolResult(content=render_payload(payload))
