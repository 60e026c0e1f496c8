from __future__ import annotations

import unittest

from app.telegram import messages
from app.telegram.commands import Action, InputKind, parse_input
from app.telegram.conversation import Flow


class ParseInputTests(unittest.TestCase):
    def test_slash_command_with_bot_suffix_and_args(self) -> None:
        parsed = parse_input("/THU@MoneyBuddyBot 100k  tm lương")
        self.assertIs(parsed.kind, InputKind.COMMAND)
        self.assertEqual(parsed.command.name, "thu")
        self.assertIs(parsed.command.flow, Flow.INCOME)
        self.assertEqual(parsed.args, "100k  tm lương")

    def test_slash_command_without_args(self) -> None:
        parsed = parse_input("  /thongke  ")
        self.assertIs(parsed.command.action, Action.REPORT)
        self.assertEqual(parsed.args, "")

    def test_unknown_slash_command(self) -> None:
        parsed = parse_input("/unknown 1 2 3")
        self.assertIs(parsed.kind, InputKind.COMMAND)
        self.assertIsNone(parsed.command)
        self.assertFalse(parsed.is_cancel)

    def test_start_and_menu_share_an_action(self) -> None:
        self.assertIs(parse_input("/start").command.action, Action.MENU)
        self.assertIs(parse_input("/menu").command.action, Action.MENU)

    def test_menu_buttons_map_to_commands(self) -> None:
        expected = {
            messages.BUTTON_INCOME: "thu",
            messages.BUTTON_EXPENSE: "chi",
            messages.BUTTON_WITHDRAW: "rut",
            messages.BUTTON_DEPOSIT: "nap",
            messages.BUTTON_REPORT: "thongke",
            messages.BUTTON_HELP: "help",
            messages.BUTTON_CANCEL: "huy",
        }
        for label, name in expected.items():
            with self.subTest(label=label):
                parsed = parse_input(label)
                self.assertIs(parsed.kind, InputKind.BUTTON)
                self.assertEqual(parsed.command.name, name)

    def test_cancel_by_command_and_button(self) -> None:
        self.assertTrue(parse_input("/huy").is_cancel)
        self.assertTrue(parse_input(messages.BUTTON_CANCEL).is_cancel)

    def test_plain_text(self) -> None:
        parsed = parse_input(" 100k ")
        self.assertIs(parsed.kind, InputKind.TEXT)
        self.assertEqual(parsed.text, "100k")
        self.assertIsNone(parsed.command)
