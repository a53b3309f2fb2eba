"""Directory implementation backed by a discord.py client cache."""

from __future__ import annotations

from typing import Any, Optional, Sequence
import logging

import discord

from discord_mcp.directory import Channel, ChannelKind, Message, Server, Thread


_KIND_BY_TYPE = {
    discord.ChannelType.text: ChannelKind.TEXT,
    discord.ChannelType.news: ChannelKind.NEWS,
    discord.ChannelType.forum: ChannelKind.FORUM,
    discord.ChannelType.public_thread: ChannelKind.THREAD,
    discord.ChannelType.private_thread: ChannelKind.THREAD,
    discord.ChannelType.news_thread: ChannelKind.THREAD,
}


def channel_kind_of(channel: Any) -> ChannelKind:
    return _KIND_BY_TYPE.get(getattr(channel, "type", None), ChannelKind.OTHER)


def to_server(guild: "discord.Guild") -> Server:
    return Server(id=guild.id, name=guild.name)


def to_channel(channel: Any) -> Channel:
    guild = getattr(channel, "guild", None)
    category = getattr(channel, "category", None)
    return Channel(
        id=channel.id,
        name=channel.name,
        kind=channel_kind_of(channel),
        server_id=guild.id if guild is not None else 0,
        topic=getattr(channel, "topic", None),
        nsfw=bool(getattr(channel, "nsfw", False)),
        parent_name=category.name if category is not None else None,
        position=getattr(channel, "position", 0) or 0,
        last_message_id=getattr(channel, "last_message_id", None),
    )


def to_thread(thread: "discord.Thread") -> Thread:
    return Thread(
        id=thread.id,
        name=thread.name,
        parent_id=thread.parent_id,
        message_count=thread.message_count or 0,
        last_message_id=thread.last_message_id,
        owner_id=thread.owner_id,
        created_at=thread.created_at,
    )


def to_message(message: "discord.Message") -> Message:
    return Message(
        id=message.id,
        channel_id=message.channel.id,
        author_tag=str(message.author),
        content=message.content,
        created_at=message.created_at,
    )


class DiscordDirectory:
    """Maps discord.py guilds, channels and threads onto directory views."""

    def __init__(self, client: "discord.Client", logger: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger("discord_mcp.discord.directory")

    def list_servers(self) -> Sequence[Server]:
        return [to_server(guild) for guild in self._client.guilds]

    async def fetch_server(self, server_id: int) -> Server:
        guild = self._client.get_guild(server_id)
        if guild is None:
            guild = await self._client.fetch_guild(server_id)
        return to_server(guild)

    def list_channels(self, server: Server) -> Sequence[Channel]:
        guild = self._client.get_guild(server.id)
        if guild is None:
            self._logger.warning("Server %s is not in the client cache.", server.id)
            return []
        return [to_channel(channel) for channel in guild.channels]

    async def fetch_channel(self, channel_id: int) -> Channel:
        return to_channel(await self._resolve_messageable(channel_id))

    def list_threads(self, forum: Channel) -> Sequence[Thread]:
        channel = self._client.get_channel(forum.id)
        if channel is None:
            return []
        return [to_thread(thread) for thread in getattr(channel, "threads", ())]

    async def fetch_active_threads(self, forum: Channel) -> Sequence[Thread]:
        guild = self._client.get_guild(forum.server_id)
        if guild is None:
            guild = await self._client.fetch_guild(forum.server_id)
        threads = await guild.active_threads()
        return [to_thread(thread) for thread in threads if thread.parent_id == forum.id]

    async def fetch_messages(
        self,
        target_id: int,
        *,
        limit: int,
        after: Optional[int] = None,
    ) -> Sequence[Message]:
        target = await self._resolve_messageable(target_id)
        after_marker = discord.Object(id=after) if after is not None else None
        messages = []
        async for message in target.history(limit=limit, after=after_marker):
            messages.append(to_message(message))
        return messages

    async def fetch_last_message(
        self,
        target_id: int,
        last_message_id: Optional[int],
    ) -> Optional[Message]:
        target = await self._resolve_messageable(target_id)
        cached = getattr(target, "last_message", None)
        if cached is not None:
            return to_message(cached)
        if last_message_id is None:
            return None
        return to_message(await target.fetch_message(last_message_id))

    async def send_message(self, channel: Channel, content: str) -> int:
        target = await self._resolve_messageable(channel.id)
        sent = await target.send(content)
        return sent.id

    async def create_forum_post(self, forum: Channel, *, title: str, content: str) -> int:
        target = await self._resolve_messageable(forum.id)
        created = await target.create_thread(name=title, content=content)
        return created.thread.id

    async def _resolve_messageable(self, channel_id: int) -> Any:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            channel = await self._client.fetch_channel(channel_id)
        return channel
