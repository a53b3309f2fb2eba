"""Ranks channels and forum threads by messages posted since an instant."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple
import asyncio
import logging

from discord_mcp.directory import Channel, Directory, Server
from discord_mcp.resolution.timewindow import scan_cursor


FETCH_LIMIT = 100


@dataclass(frozen=True)
class ActivityRecord:
    id: int
    name: str
    message_count: int
    last_message_at: datetime
    oldest_new_message_at: datetime


@dataclass(frozen=True)
class ActivityReport:
    server: Server
    since: datetime
    records: Tuple[ActivityRecord, ...]

    @property
    def total(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class _ScanTarget:
    id: int
    name: str
    label: str


class ActivityScanner:
    """Counts recent messages per text channel and per cached forum thread.

    Each target is fetched once with a ``FETCH_LIMIT`` window after the
    cursor for ``since``; busier targets report at most ``FETCH_LIMIT``.
    """

    def __init__(
        self,
        directory: Directory,
        *,
        concurrency: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be a positive integer.")
        self._directory = directory
        self._concurrency = concurrency
        self._logger = logger or logging.getLogger("discord_mcp.activity")

    async def scan(self, server: Server, since: datetime) -> ActivityReport:
        cursor = scan_cursor(since)
        targets = self._collect_targets(server)
        self._logger.debug(
            "Scanning %s targets in server %s since %s (cursor=%s)",
            len(targets),
            server.id,
            since.isoformat(),
            cursor,
        )

        if self._concurrency == 1:
            results = [await self._scan_target(target, cursor, since) for target in targets]
        else:
            semaphore = asyncio.Semaphore(self._concurrency)

            async def _bounded(target: _ScanTarget) -> Optional[ActivityRecord]:
                async with semaphore:
                    return await self._scan_target(target, cursor, since)

            results = await asyncio.gather(*(_bounded(target) for target in targets))

        records = [record for record in results if record is not None]
        records.sort(key=lambda record: record.message_count, reverse=True)
        return ActivityReport(server=server, since=since, records=tuple(records))

    def _collect_targets(self, server: Server) -> list[_ScanTarget]:
        targets: list[_ScanTarget] = []
        for channel in self._directory.list_channels(server):
            if not channel.kind.is_text_capable:
                continue
            if channel.kind.is_forum:
                targets.extend(self._thread_targets(channel))
            else:
                targets.append(
                    _ScanTarget(id=channel.id, name=channel.name, label=f"#{channel.name}")
                )
        return targets

    def _thread_targets(self, forum: Channel) -> Sequence[_ScanTarget]:
        try:
            threads = self._directory.list_threads(forum)
        except Exception as exc:
            self._logger.warning("Error listing threads of forum #%s: %s", forum.name, exc)
            return ()
        return [
            _ScanTarget(
                id=thread.id,
                name=f"[Forum: {forum.name}] {thread.name}",
                label=f"thread #{thread.name}",
            )
            for thread in threads
        ]

    async def _scan_target(
        self,
        target: _ScanTarget,
        cursor: int,
        since: datetime,
    ) -> Optional[ActivityRecord]:
        try:
            messages = await self._directory.fetch_messages(
                target.id,
                limit=FETCH_LIMIT,
                after=cursor,
            )
        except Exception as exc:
            self._logger.warning("Error fetching messages from %s: %s", target.label, exc)
            return None

        # The cursor is millisecond-granular; re-check the exact instant.
        fresh = [message for message in messages if message.created_at >= since]
        if not fresh:
            return None

        timestamps = [message.created_at for message in fresh]
        return ActivityRecord(
            id=target.id,
            name=target.name,
            message_count=len(fresh),
            last_message_at=max(timestamps),
            oldest_new_message_at=min(timestamps),
        )
