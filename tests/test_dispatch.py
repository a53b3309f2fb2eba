from __future__ import annotations

from pathlib import Path
import json
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parent))

from directory_fakes import BASE_TIME, FakeDirectory, make_channel, make_message, make_server, minutes

from discord_mcp.errors import InvalidArgumentsError
from discord_mcp.tools.dispatch import ToolDispatcher, format_tool_error
from discord_mcp.tools.handlers import ToolHandlers
from discord_mcp.tools.schemas import ReadMessagesArgs, validate_arguments


def _dispatcher(directory: FakeDirectory) -> ToolDispatcher:
    return ToolDispatcher(ToolHandlers(directory))


class ValidateArgumentsTests(unittest.TestCase):
    def test_applies_defaults(self):
        args = validate_arguments(ReadMessagesArgs, {"channel": "general"})

        self.assertEqual(args.limit, 50)
        self.assertIsNone(args.server)

    def test_reports_each_failing_field(self):
        with self.assertRaises(InvalidArgumentsError) as ctx:
            validate_arguments(ReadMessagesArgs, {"limit": 500})

        message = str(ctx.exception)
        self.assertTrue(message.startswith("Invalid arguments: "))
        self.assertIn("channel: Field required", message)
        self.assertIn("limit: Input should be less than or equal to 100", message)

    def test_missing_payload_is_treated_as_empty(self):
        with self.assertRaises(InvalidArgumentsError):
            validate_arguments(ReadMessagesArgs, None)

    def test_non_mapping_payload_is_an_argument_error(self):
        with self.assertRaises(InvalidArgumentsError) as ctx:
            validate_arguments(ReadMessagesArgs, ["general"])

        message = str(ctx.exception)
        self.assertTrue(message.startswith("Invalid arguments: arguments: "))
        self.assertIn("valid dictionary", message)


class ToolDispatcherTests(unittest.IsolatedAsyncioTestCase):
    async def test_lists_the_four_tools_with_schemas(self):
        dispatcher = _dispatcher(FakeDirectory())

        specs = {spec.name: spec for spec in dispatcher.tools()}

        self.assertEqual(
            sorted(specs),
            [
                "list-channels",
                "list-channels-with-new-messages",
                "read-messages",
                "send-message",
            ],
        )
        self.assertEqual(specs["send-message"].input_schema()["required"], ["channel", "message"])
        self.assertEqual(specs["list-channels"].input_schema()["required"], [])
        self.assertEqual(specs["list-channels-with-new-messages"].input_schema()["required"], ["since"])
        limit = specs["read-messages"].input_schema()["properties"]["limit"]
        self.assertEqual((limit["minimum"], limit["maximum"], limit["default"]), (1, 100, 50))

    async def test_success_renders_pretty_json(self):
        directory = FakeDirectory(
            servers=[make_server(1, "Arkham")],
            channels=[make_channel(100, "general")],
            messages={100: [make_message(100, BASE_TIME + minutes(2))]},
        )

        result = await _dispatcher(directory).call(
            "list-channels-with-new-messages",
            {"since": "2026-02-14T09:00:00Z"},
        )

        self.assertFalse(result.is_error)
        payload = json.loads(result.content)
        self.assertEqual(payload["totalChannelsWithNewMessages"], 1)
        self.assertEqual(result.content, json.dumps(payload, indent=2, ensure_ascii=False))
        self.assertIn('\n  "server": "Arkham"', result.content)

    async def test_unknown_tool_is_an_error_result(self):
        result = await _dispatcher(FakeDirectory()).call("delete-server", {})

        self.assertTrue(result.is_error)
        self.assertEqual(result.content, "Unknown tool: delete-server")

    async def test_invalid_arguments_are_an_error_result(self):
        result = await _dispatcher(FakeDirectory()).call("send-message", {"channel": "general"})

        self.assertTrue(result.is_error)
        self.assertEqual(result.content, "Invalid arguments: message: Field required")

    async def test_resolution_errors_keep_candidate_listing(self):
        directory = FakeDirectory(servers=[make_server(1, "Arkham"), make_server(2, "Dunwich")])

        result = await _dispatcher(directory).call("list-channels", {})

        self.assertTrue(result.is_error)
        self.assertIn('Available servers: "Arkham", "Dunwich"', result.content)

    async def test_invalid_time_is_an_error_result(self):
        directory = FakeDirectory(servers=[make_server(1, "Arkham")])

        result = await _dispatcher(directory).call(
            "list-channels-with-new-messages",
            {"since": "last tuesday"},
        )

        self.assertTrue(result.is_error)
        self.assertTrue(result.content.startswith("Invalid time format."))

    async def test_unexpected_failures_are_reported_with_type(self):
        directory = FakeDirectory(servers=[make_server(1, "Arkham")], channels=[make_channel(100, "general")])

        async def _boom(channel, content):
            raise PermissionError("Missing Permissions")

        directory.send_message = _boom

        with self.assertLogs("discord_mcp.tools.dispatch", level="ERROR"):
            result = await _dispatcher(directory).call(
                "send-message",
                {"channel": "general", "message": "hi"},
            )

        self.assertTrue(result.is_error)
        self.assertEqual(result.content, "PermissionError: Missing Permissions")

    def test_format_tool_error_passes_domain_messages_through(self):
        self.assertEqual(format_tool_error(InvalidArgumentsError("bad")), "bad")
        self.assertEqual(format_tool_error(KeyError("x")), "KeyError: 'x'")


if __name__ == "__main__":
    unittest.main()
