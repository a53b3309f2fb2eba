"""Tool operations over the resolved server/channel model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
import logging

from discord_mcp.activity.scanner import ActivityScanner
from discord_mcp.directory import Channel, Directory, Message, Server, Thread
from discord_mcp.resolution.channels import ChannelResolver
from discord_mcp.resolution.guilds import GuildResolver
from discord_mcp.resolution.timewindow import parse_boundary
from discord_mcp.tools.schemas import (
    ListChannelsArgs,
    ListChannelsWithNewMessagesArgs,
    ReadMessagesArgs,
    SendMessageArgs,
)


FORUM_TITLE_LIMIT = 50
_ELLIPSIS = "..."


def format_instant(value: datetime) -> str:
    """Render an instant as UTC ISO 8601 with millisecond precision and a ``Z`` suffix."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def forum_post_title(message: str) -> str:
    if len(message) <= FORUM_TITLE_LIMIT:
        return message
    return message[:FORUM_TITLE_LIMIT] + _ELLIPSIS


class ToolHandlers:
    """Resolves tool arguments and projects results into JSON-ready payloads."""

    def __init__(
        self,
        directory: Directory,
        *,
        guilds: Optional[GuildResolver] = None,
        channels: Optional[ChannelResolver] = None,
        scanner: Optional[ActivityScanner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._directory = directory
        self._logger = logger or logging.getLogger("discord_mcp.tools")
        self._guilds = guilds or GuildResolver(directory, logger=self._logger)
        self._channels = channels or ChannelResolver(directory, logger=self._logger)
        self._scanner = scanner or ActivityScanner(directory, logger=self._logger)

    async def send_message(self, args: SendMessageArgs) -> dict[str, Any]:
        server, channel = await self._resolve_channel(args.server, args.channel)
        base = {
            "server": server.name,
            "serverId": str(server.id),
            "channel": f"#{channel.name}",
            "channelId": str(channel.id),
        }

        if channel.kind.is_forum:
            thread_id = await self._directory.create_forum_post(
                channel,
                title=forum_post_title(args.message),
                content=args.message,
            )
            self._logger.info("Created forum post %s in #%s", thread_id, channel.name)
            return {"status": "forum_post_created", **base, "threadId": str(thread_id)}

        message_id = await self._directory.send_message(channel, args.message)
        self._logger.info("Sent message %s to #%s", message_id, channel.name)
        return {"status": "sent", **base, "messageId": str(message_id)}

    async def read_messages(self, args: ReadMessagesArgs) -> list[dict[str, Any]]:
        server, channel = await self._resolve_channel(args.server, args.channel)

        if channel.kind.is_forum:
            # Forums have no message stream of their own; list their active posts.
            threads = await self._directory.fetch_active_threads(channel)
            return [
                self._thread_entry(server, channel, thread)
                for thread in list(threads)[: args.limit]
            ]

        messages = await self._directory.fetch_messages(channel.id, limit=args.limit)
        return [
            {
                "channel": f"#{channel.name}",
                "server": server.name,
                "author": message.author_tag,
                "content": message.content,
                "timestamp": format_instant(message.created_at),
            }
            for message in messages
        ]

    async def list_channels(self, args: ListChannelsArgs) -> dict[str, Any]:
        server = await self._guilds.resolve(args.server)
        channels = [
            channel
            for channel in self._directory.list_channels(server)
            if channel.kind.is_text_capable
        ]

        entries = []
        for channel in channels:
            entry: dict[str, Any] = {
                "id": str(channel.id),
                "name": channel.name,
                "type": channel.kind.value,
                "parent": channel.parent_name,
                "position": channel.position,
                "topic": channel.topic or "",
                "nsfw": channel.nsfw,
            }
            if channel.kind.is_forum:
                threads = list(self._directory.list_threads(channel))
                entry["threadCount"] = len(threads)
                entry["threads"] = [
                    {
                        "id": str(thread.id),
                        "name": thread.name,
                        "messageCount": thread.message_count,
                        "lastMessageId": _optional_id(thread.last_message_id),
                        "lastMessage": await self._last_message_preview(
                            thread.id,
                            thread.last_message_id,
                            label=f"thread #{thread.name}",
                        ),
                    }
                    for thread in threads
                ]
            else:
                entry["lastMessage"] = await self._last_message_preview(
                    channel.id,
                    channel.last_message_id,
                    label=f"#{channel.name}",
                )
            entries.append(entry)

        return {
            "server": server.name,
            "serverId": str(server.id),
            "channels": entries,
            "totalChannels": len(entries),
        }

    async def list_channels_with_new_messages(
        self,
        args: ListChannelsWithNewMessagesArgs,
    ) -> dict[str, Any]:
        server = await self._guilds.resolve(args.server)
        since = parse_boundary(args.since)
        report = await self._scanner.scan(server, since)

        return {
            "server": server.name,
            "serverId": str(server.id),
            "since": format_instant(since),
            "channels": [
                {
                    "id": str(record.id),
                    "name": record.name,
                    "messageCount": record.message_count,
                    "lastMessageAt": format_instant(record.last_message_at),
                    "oldestNewMessageAt": format_instant(record.oldest_new_message_at),
                }
                for record in report.records
            ],
            "totalChannelsWithNewMessages": report.total,
        }

    async def _resolve_channel(
        self,
        server_identifier: Optional[str],
        channel_identifier: str,
    ) -> tuple[Server, Channel]:
        server = await self._guilds.resolve(server_identifier)
        channel = await self._channels.resolve(server, channel_identifier)
        return server, channel

    async def _last_message_preview(
        self,
        target_id: int,
        last_message_id: Optional[int],
        *,
        label: str,
    ) -> Optional[dict[str, Any]]:
        if last_message_id is None:
            return None
        try:
            message = await self._directory.fetch_last_message(target_id, last_message_id)
        except Exception as exc:
            self._logger.warning("Failed to fetch last message for %s: %s", label, exc)
            return None
        if message is None:
            return None
        return _message_preview(message)

    @staticmethod
    def _thread_entry(server: Server, forum: Channel, thread: Thread) -> dict[str, Any]:
        created_at = thread.created_at or datetime.now(timezone.utc)
        return {
            "channel": f"#{forum.name}",
            "server": server.name,
            "author": f"<Thread Owner ID: {thread.owner_id}>",
            "content": f"[Forum Thread] {thread.name} (Messages: {thread.message_count})",
            "timestamp": format_instant(created_at),
            "threadId": str(thread.id),
        }


def _message_preview(message: Message) -> dict[str, Any]:
    return {
        "content": message.content,
        "author": message.author_tag,
        "timestamp": format_instant(message.created_at),
    }


def _optional_id(value: Optional[int]) -> Optional[str]:
    return str(value) if value is not None else None
