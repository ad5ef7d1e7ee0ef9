"""Text of the responses sent back on a client connection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .commands import CommandType
from .repository import NamesResult
from .status import describe

_LIST_TYPES = frozenset(
    {CommandType.LIST_THEMES, CommandType.LIST_TOPICS, CommandType.LIST_USERS}
)


@dataclass
class Answer:
    """The outcome of a command: a status and what goes with it."""

    status: int
    njoiners: Optional[int] = None
    names: Optional[NamesResult] = None
    username: Optional[str] = None


def _status_line(status: int) -> str:
    return f"{int(status)} {describe(status)}\n"


def status_response(status: int) -> str:
    """A response holding only the status line."""
    return _status_line(status) + "\n"


def _content(answer: Answer, command_type: CommandType) -> str:
    if command_type in _LIST_TYPES:
        names = answer.names
        if names is not None and names.nresults > 0:
            return names.text
        return ""
    if command_type == CommandType.JOIN_TOPIC:
        return f"{answer.njoiners or 0}\n"
    if command_type == CommandType.CREATE_TOPIC:
        text = f"{answer.username or ''}\n"
        if answer.njoiners is not None:
            text += f"{answer.njoiners}\n"
        return text
    if command_type == CommandType.LEAVE_TOPIC:
        return f"{answer.njoiners or 0}\n"
    return ""


def build_response(answer: Answer, command_type: CommandType) -> str:
    """Status line, the content the command type calls for, and a blank line."""
    return _status_line(answer.status) + _content(answer, command_type) + "\n"