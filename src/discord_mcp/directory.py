"""Read-only views over the chat platform's live object graph."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol, Sequence


class ChannelKind(str, Enum):
    TEXT = "text"
    NEWS = "news"
    FORUM = "forum"
    THREAD = "thread"
    OTHER = "other"

    @property
    def is_text_capable(self) -> bool:
        """Kinds that can be resolved by name and addressed by the tools."""
        return self in _TEXT_CAPABLE_KINDS

    @property
    def is_forum(self) -> bool:
        return self is ChannelKind.FORUM


_TEXT_CAPABLE_KINDS = frozenset({ChannelKind.TEXT, ChannelKind.NEWS, ChannelKind.FORUM})


@dataclass(frozen=True)
class Server:
    id: int
    name: str


@dataclass(frozen=True)
class Channel:
    id: int
    name: str
    kind: ChannelKind
    server_id: int
    topic: Optional[str] = None
    nsfw: bool = False
    parent_name: Optional[str] = None
    position: int = 0
    last_message_id: Optional[int] = None


@dataclass(frozen=True)
class Thread:
    id: int
    name: str
    parent_id: int
    message_count: int = 0
    last_message_id: Optional[int] = None
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Message:
    id: int
    channel_id: int
    author_tag: str
    content: str
    created_at: datetime


class Directory(Protocol):
    """Snapshot queries and fetches the resolvers and tools depend on.

    ``list_*`` calls read the client's cache and never touch the network;
    ``fetch_*`` and ``send_*`` calls may, and raise when the entity does not
    exist or is not visible to the bot.
    """

    def list_servers(self) -> Sequence[Server]:
        ...

    async def fetch_server(self, server_id: int) -> Server:
        ...

    def list_channels(self, server: Server) -> Sequence[Channel]:
        ...

    async def fetch_channel(self, channel_id: int) -> Channel:
        ...

    def list_threads(self, forum: Channel) -> Sequence[Thread]:
        ...

    async def fetch_active_threads(self, forum: Channel) -> Sequence[Thread]:
        ...

    async def fetch_messages(
        self,
        target_id: int,
        *,
        limit: int,
        after: Optional[int] = None,
    ) -> Sequence[Message]:
        ...

    async def fetch_last_message(
        self,
        target_id: int,
        last_message_id: Optional[int],
    ) -> Optional[Message]:
        ...

    async def send_message(self, channel: Channel, content: str) -> int:
        ...

    async def create_forum_post(self, forum: Channel, *, title: str, content: str) -> int:
        ...


def parse_snowflake(identifier: str) -> Optional[int]:
    """Return the identifier as a positive integer id, or None when it is a name."""

    text = identifier.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value > 0 else None
