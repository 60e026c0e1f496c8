"""Tokenizer and command table for inbound chat text.

Slash commands, menu buttons and free text all go through ``parse_input``
so the handler dispatches on one structure instead of per-command regexes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import messages
from .conversation import Flow


class Action(str, Enum):
    FLOW = "flow"
    REPORT = "report"
    HELP = "help"
    MENU = "menu"
    CANCEL = "cancel"


class InputKind(str, Enum):
    COMMAND = "command"
    BUTTON = "button"
    TEXT = "text"


@dataclass(frozen=True)
class Command:
    name: str
    action: Action
    flow: Optional[Flow] = None


COMMANDS: dict[str, Command] = {
    command.name: command
    for command in (
        Command("thu", Action.FLOW, Flow.INCOME),
        Command("chi", Action.FLOW, Flow.EXPENSE),
        Command("rut", Action.FLOW, Flow.WITHDRAW),
        Command("nap", Action.FLOW, Flow.DEPOSIT),
        Command("thongke", Action.REPORT),
        Command("help", Action.HELP),
        Command("start", Action.MENU),
        Command("menu", Action.MENU),
        Command("huy", Action.CANCEL),
    )
}

MENU_BUTTONS: dict[str, Command] = {
    messages.BUTTON_INCOME: COMMANDS["thu"],
    messages.BUTTON_EXPENSE: COMMANDS["chi"],
    messages.BUTTON_WITHDRAW: COMMANDS["rut"],
    messages.BUTTON_DEPOSIT: COMMANDS["nap"],
    messages.BUTTON_REPORT: COMMANDS["thongke"],
    messages.BUTTON_HELP: COMMANDS["help"],
    messages.BUTTON_CANCEL: COMMANDS["huy"],
}


@dataclass(frozen=True)
class ParsedInput:
    kind: InputKind
    text: str
    command: Optional[Command] = None
    args: str = ""

    @property
    def is_cancel(self) -> bool:
        return self.command is not None and self.command.action is Action.CANCEL


def parse_input(text: str) -> ParsedInput:
    stripped = text.strip()
    if stripped.startswith("/"):
        head, *rest = stripped.split(maxsplit=1)
        # ``/thu@MoneyBuddyBot`` addresses a bot explicitly in group chats.
        name = head[1:].split("@", 1)[0].lower()
        return ParsedInput(
            kind=InputKind.COMMAND,
            text=stripped,
            command=COMMANDS.get(name),
            args=rest[0].strip() if rest else "",
        )
    button = MENU_BUTTONS.get(stripped)
    if button is not None:
        return ParsedInput(kind=InputKind.BUTTON, text=stripped, command=button)
    return ParsedInput(kind=InputKind.TEXT, text=stripped)
