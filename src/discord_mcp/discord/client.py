"""Discord client service wrapping discord.py."""

from __future__ import annotations

from typing import Optional
import asyncio
import logging

import discord

from discord_mcp.discord.directory import DiscordDirectory


class DiscordStartupError(RuntimeError):
    """Raised when the gateway session ends or stalls before becoming ready."""


def build_intents() -> "discord.Intents":
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    return intents


class DiscordClientService:
    """Owns the gateway session whose cache backs the tool directory."""

    def __init__(
        self,
        *,
        bot_token: str,
        ready_timeout_seconds: float = 30.0,
        client: Optional["discord.Client"] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not bot_token.strip():
            raise ValueError("bot_token cannot be empty.")
        if ready_timeout_seconds <= 0:
            raise ValueError("ready_timeout_seconds must be > 0.")

        self._bot_token = bot_token
        self._ready_timeout_seconds = ready_timeout_seconds
        self._logger = logger or logging.getLogger("discord_mcp.discord.client")

        intents = build_intents()
        self._logger.info(
            "Intents: message_content=%s, guild_messages=%s, guilds=%s",
            intents.message_content,
            intents.guild_messages,
            intents.guilds,
        )
        self._client = client if client is not None else discord.Client(intents=intents)
        self._directory = DiscordDirectory(self._client, logger=self._logger)

        self._ready_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        @self._client.event
        async def on_ready():
            await self._on_ready()

    @property
    def directory(self) -> DiscordDirectory:
        return self._directory

    async def start(self) -> None:
        """Log in, connect the gateway in the background and wait until ready."""
        self._task = asyncio.create_task(self._client.start(self._bot_token))
        ready_waiter = asyncio.create_task(self._ready_event.wait())

        done, _ = await asyncio.wait(
            {self._task, ready_waiter},
            timeout=self._ready_timeout_seconds,
            return_when=asyncio.FIRST_COMPLETED,
        )
        if ready_waiter in done:
            self._logger.info(
                "Discord client ready: bot_user_id=%s guilds=%s",
                self._client.user.id if self._client.user else None,
                len(self._client.guilds),
            )
            return

        ready_waiter.cancel()
        if self._task in done:
            exc = None if self._task.cancelled() else self._task.exception()
            self._task = None
            raise DiscordStartupError(
                f"Discord client stopped before becoming ready: {exc or 'session closed'}"
            ) from exc

        await self.stop()
        raise DiscordStartupError(
            f"Discord client was not ready after {self._ready_timeout_seconds} seconds."
        )

    async def stop(self) -> None:
        """Stop the Discord client gracefully."""
        await self._client.close()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                self._logger.debug("Discord client task ended with an error.", exc_info=True)
            self._task = None

    async def _on_ready(self) -> None:
        self._logger.info(
            "Discord client connected as %s to %s servers",
            self._client.user,
            len(self._client.guilds),
        )
        for guild in self._client.guilds:
            self._logger.debug("Connected server: id=%s name=%s", guild.id, guild.name)
        self._ready_event.set()
