from __future__ import annotations

from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parent))

from directory_fakes import FakeDirectory, make_server

from discord_mcp.errors import AmbiguousServerError, ServerNotFoundError
from discord_mcp.resolution.guilds import GuildResolver


class GuildResolverTests(unittest.IsolatedAsyncioTestCase):
    async def test_single_server_is_default(self):
        home = make_server(1, "Arkham")
        resolver = GuildResolver(FakeDirectory(servers=[home]))

        self.assertEqual(await resolver.resolve(None), home)

    async def test_blank_identifier_is_looked_up_not_defaulted(self):
        resolver = GuildResolver(FakeDirectory(servers=[make_server(1, "Arkham")]))

        with self.assertRaises(ServerNotFoundError) as ctx:
            await resolver.resolve("  ")

        self.assertEqual(ctx.exception.candidates, ("Arkham",))

    async def test_missing_identifier_with_several_servers_is_ambiguous(self):
        resolver = GuildResolver(
            FakeDirectory(servers=[make_server(1, "Arkham"), make_server(2, "Dunwich")])
        )

        with self.assertRaises(AmbiguousServerError) as ctx:
            await resolver.resolve()

        self.assertEqual(ctx.exception.candidates, ("Arkham", "Dunwich"))
        self.assertIn('"Arkham", "Dunwich"', str(ctx.exception))

    async def test_missing_identifier_without_servers_is_not_found(self):
        resolver = GuildResolver(FakeDirectory())

        with self.assertRaises(ServerNotFoundError):
            await resolver.resolve()

    async def test_numeric_identifier_fetches_by_id_first(self):
        directory = FakeDirectory(servers=[make_server(111, "Arkham"), make_server(222, "Dunwich")])
        resolver = GuildResolver(directory)

        server = await resolver.resolve("222")

        self.assertEqual(server.name, "Dunwich")
        self.assertEqual(directory.server_fetches, [222])

    async def test_failed_id_fetch_falls_back_to_name(self):
        directory = FakeDirectory(servers=[make_server(1, "1984"), make_server(2, "Dunwich")])
        resolver = GuildResolver(directory)

        server = await resolver.resolve("1984")

        self.assertEqual(server.id, 1)
        self.assertEqual(directory.server_fetches, [1984])

    async def test_name_match_is_case_insensitive(self):
        resolver = GuildResolver(
            FakeDirectory(servers=[make_server(1, "Arkham"), make_server(2, "Dunwich")])
        )

        server = await resolver.resolve("dUNWICH")

        self.assertEqual(server.id, 2)

    async def test_unknown_name_lists_available_servers(self):
        directory = FakeDirectory(servers=[make_server(1, "Arkham"), make_server(2, "Dunwich")])
        resolver = GuildResolver(directory)

        with self.assertRaises(ServerNotFoundError) as ctx:
            await resolver.resolve("Innsmouth")

        self.assertEqual(ctx.exception.candidates, ("Arkham", "Dunwich"))
        self.assertEqual(
            str(ctx.exception),
            'Server "Innsmouth" not found. Available servers: "Arkham", "Dunwich"',
        )
        self.assertEqual(directory.server_fetches, [])

    async def test_duplicate_names_are_ambiguous_with_ids(self):
        directory = FakeDirectory(
            servers=[make_server(10, "Campaign"), make_server(20, "campaign"), make_server(30, "Other")]
        )
        resolver = GuildResolver(directory)

        with self.assertRaises(AmbiguousServerError) as ctx:
            await resolver.resolve("CAMPAIGN")

        self.assertEqual(ctx.exception.candidates, (("Campaign", 10), ("campaign", 20)))
        self.assertIn("Campaign (ID: 10), campaign (ID: 20)", str(ctx.exception))
        self.assertIn("Please specify the server ID.", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
