"""Protocol commands and the readers of their argument lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, ClassVar, Optional, Sequence

from .status import (
    MAX_PASSWORD_SIZE,
    MAX_THEME_NAME,
    MAX_TOPIC_NAME,
    MAX_USER_NAME,
    Status,
    describe,
)
from .strutils import LF, check_empty_line, check_line_termination, next_word

MAX_BCAST_MSG_LINES = 32

_NUMBER_WORD = 10
_PORT_WORD = 7


class CommandType(IntEnum):
    """Kinds of request a client may send."""

    REGIST = 0
    UNREGIST = 1
    CREATE_THEME = 2
    CREATE_TOPIC = 3
    LIST_THEMES = 4
    LIST_TOPICS = 5
    REMOVE_THEME = 6
    REMOVE_TOPIC = 7
    DESTROY_TOPIC = 8
    JOIN_TOPIC = 9
    UNKNOWN = 10
    LEAVE_TOPIC = 11
    BROADCAST = 12
    MESSAGE = 13
    LIST_USERS = 14
    STOP = 15


class CommandError(Exception):
    """A command or one of its argument lines was rejected."""

    def __init__(self, status: int) -> None:
        self.status = int(status)
        super().__init__(describe(self.status))


_ATOI = re.compile(r"\s*([+-]?\d+)")


def _atoi(word: str) -> int:
    match = _ATOI.match(word)
    return int(match.group(1)) if match else 0


def _positive(word: str) -> int:
    value = _atoi(word)
    if value <= 0:
        raise CommandError(Status.BAD_COMMAND_ARGS)
    return value


def _words(line: str, sizes: Sequence[int]) -> list[str]:
    """Read one word per size and require nothing else on the line."""
    words = []
    index = 0
    try:
        for size in sizes:
            word, index = next_word(line, index, size)
            words.append(word)
    except ValueError:
        raise CommandError(Status.BAD_COMMAND_ARGS) from None
    if not check_line_termination(line, index):
        raise CommandError(Status.BAD_COMMAND_ARGS)
    return words


Step = Callable[[str, Any], None]


@dataclass(eq=False)
class Command:
    """A request being assembled from its argument lines."""

    type: ClassVar[CommandType] = CommandType.UNKNOWN
    keyword: ClassVar[str] = ""

    user: Any = None
    argline: int = 0

    def _steps(self) -> Sequence[Step]:
        return ()

    def read_args(self, line: str, repository: Any) -> bool:
        """Consume one argument line.

        Returns True while more lines are expected and False when the
        arguments are complete; raises CommandError on a bad line.
        """
        steps = self._steps()
        if self.argline < len(steps):
            steps[self.argline](line, repository)
            self.argline += 1
            return True
        return self._read_tail(line, len(steps))

    def _read_tail(self, line: str, nsteps: int) -> bool:
        if check_empty_line(line):
            return False
        raise CommandError(Status.BAD_COMMAND)

    def _authenticate(self, line: str, repository: Any) -> None:
        try:
            name, index = next_word(line, 0, MAX_USER_NAME)
            passwd, index = next_word(line, index, MAX_PASSWORD_SIZE)
        except ValueError:
            raise CommandError(Status.BAD_USER_AUTH) from None
        if not check_line_termination(line, index):
            raise CommandError(Status.BAD_USER_AUTH)
        user = repository.user_get(name, passwd)
        if user is None:
            raise CommandError(Status.BAD_USER_AUTH)
        self.user = user


@dataclass(eq=False)
class Regist(Command):
    """Register a user: ``number name password``."""

    type: ClassVar[CommandType] = CommandType.REGIST
    keyword: ClassVar[str] = "REGIST"

    number: int = 0
    username: str = ""
    passwd: str = ""

    def _steps(self) -> Sequence[Step]:
        return (self._read_registration,)

    def _read_registration(self, line: str, repository: Any) -> None:
        try:
            word, index = next_word(line, 0, _NUMBER_WORD)
        except ValueError:
            raise CommandError(Status.BAD_COMMAND_ARGS) from None
        self.number = _positive(word)
        self.username, self.passwd = _words(line[index:], (MAX_USER_NAME, MAX_PASSWORD_SIZE))


@dataclass(eq=False)
class _AuthOnly(Command):
    def _steps(self) -> Sequence[Step]:
        return (self._authenticate,)


@dataclass(eq=False)
class Unregist(_AuthOnly):
    """Unregister the authenticated user."""

    type: ClassVar[CommandType] = CommandType.UNREGIST
    keyword: ClassVar[str] = "UNREGIST"


@dataclass(eq=False)
class ListThemes(_AuthOnly):
    """List every theme."""

    type: ClassVar[CommandType] = CommandType.LIST_THEMES
    keyword: ClassVar[str] = "LIST_THEMES"


@dataclass(eq=False)
class _ThemeCommand(Command):
    theme: str = ""

    def _steps(self) -> Sequence[Step]:
        return (self._authenticate, self._read_theme)

    def _read_theme(self, line: str, repository: Any) -> None:
        (self.theme,) = _words(line, (MAX_THEME_NAME,))


@dataclass(eq=False)
class CreateTheme(_ThemeCommand):
    """Create a theme."""

    type: ClassVar[CommandType] = CommandType.CREATE_THEME
    keyword: ClassVar[str] = "CREATE_THEME"


@dataclass(eq=False)
class ListTopics(_ThemeCommand):
    """List the topics of a theme."""

    type: ClassVar[CommandType] = CommandType.LIST_TOPICS
    keyword: ClassVar[str] = "LIST_TOPICS"


@dataclass(eq=False)
class RemoveTheme(_ThemeCommand):
    """Remove an empty theme."""

    type: ClassVar[CommandType] = CommandType.REMOVE_THEME
    keyword: ClassVar[str] = "REMOVE_THEME"


@dataclass(eq=False)
class ListUsers(Command):
    """List every registered user; takes no arguments."""

    type: ClassVar[CommandType] = CommandType.LIST_USERS
    keyword: ClassVar[str] = "LIST_USERS"


@dataclass(eq=False)
class Stop(Command):
    """Ask the server to stop; takes no arguments."""

    type: ClassVar[CommandType] = CommandType.STOP
    keyword: ClassVar[str] = "STOP"


@dataclass(eq=False)
class _TopicCommand(Command):
    theme: str = ""
    topic: str = ""

    def _steps(self) -> Sequence[Step]:
        return (self._authenticate, self._read_target)

    def _read_target(self, line: str, repository: Any) -> None:
        self.theme, self.topic = _words(line, (MAX_THEME_NAME, MAX_TOPIC_NAME))

    def _read_port(self, line: str, repository: Any) -> None:
        try:
            word, index = next_word(line, 0, _PORT_WORD)
        except ValueError:
            raise CommandError(Status.BAD_COMMAND_ARGS) from None
        port = _positive(word)
        if not check_line_termination(line, index):
            raise CommandError(Status.BAD_COMMAND_ARGS)
        self.port = port


@dataclass(eq=False)
class CreateTopic(_TopicCommand):
    """Create a topic: ``theme topic [limit]`` then the messaging port."""

    type: ClassVar[CommandType] = CommandType.CREATE_TOPIC
    keyword: ClassVar[str] = "CREATE_TOPIC"

    port: int = 0
    limit: int = 0

    def _steps(self) -> Sequence[Step]:
        return (self._authenticate, self._read_new_topic, self._read_port)

    def _read_new_topic(self, line: str, repository: Any) -> None:
        try:
            self.theme, index = next_word(line, 0, MAX_THEME_NAME)
            self.topic, index = next_word(line, index, MAX_TOPIC_NAME)
        except ValueError:
            raise CommandError(Status.BAD_COMMAND_ARGS) from None
        if check_line_termination(line, index):
            return
        try:
            word, index = next_word(line, index, _NUMBER_WORD)
        except ValueError:
            raise CommandError(Status.BAD_COMMAND_ARGS) from None
        self.limit = _positive(word)
        if not check_line_termination(line, index):
            raise CommandError(Status.BAD_COMMAND_ARGS)


@dataclass(eq=False)
class RemoveTopic(_TopicCommand):
    """Remove a topic only its owner belongs to."""

    type: ClassVar[CommandType] = CommandType.REMOVE_TOPIC
    keyword: ClassVar[str] = "REMOVE_TOPIC"


@dataclass(eq=False)
class DestroyTopic(_TopicCommand):
    """Destroy a topic and tell its partners."""

    type: ClassVar[CommandType] = CommandType.DESTROY_TOPIC
    keyword: ClassVar[str] = "DESTROY_TOPIC"


@dataclass(eq=False)
class JoinTopic(_TopicCommand):
    """Join a topic: ``theme topic`` then the messaging port."""

    type: ClassVar[CommandType] = CommandType.JOIN_TOPIC
    keyword: ClassVar[str] = "JOIN_TOPIC"

    port: int = 0
    njoiners: int = 0

    def _steps(self) -> Sequence[Step]:
        return (self._authenticate, self._read_target, self._read_port)


@dataclass(eq=False)
class LeaveTopic(_TopicCommand):
    """Leave a topic."""

    type: ClassVar[CommandType] = CommandType.LEAVE_TOPIC
    keyword: ClassVar[str] = "LEAVE_TOPIC"

    njoiners: int = 0


@dataclass(eq=False)
class _BodyCommand(_TopicCommand):
    lines: list[str] = field(default_factory=list)

    def _read_tail(self, line: str, nsteps: int) -> bool:
        if self.argline > nsteps and check_empty_line(line):
            return False
        if len(self.lines) >= MAX_BCAST_MSG_LINES:
            raise CommandError(Status.BAD_COMMAND_ARGS)
        self.lines.append(line if line.endswith(LF) else line + LF)
        self.argline += 1
        return True


@dataclass(eq=False)
class Broadcast(_BodyCommand):
    """Send the body lines to every other joiner of a topic."""

    type: ClassVar[CommandType] = CommandType.BROADCAST
    keyword: ClassVar[str] = "BROADCAST"


@dataclass(eq=False)
class Message(_BodyCommand):
    """Send the body lines to one joiner: ``theme topic user``."""

    type: ClassVar[CommandType] = CommandType.MESSAGE
    keyword: ClassVar[str] = "MESSAGE"

    user_dest: str = ""

    def _read_target(self, line: str, repository: Any) -> None:
        self.theme, self.topic, self.user_dest = _words(
            line, (MAX_THEME_NAME, MAX_TOPIC_NAME, MAX_USER_NAME)
        )


_COMMANDS: dict[str, type[Command]] = {
    cls.keyword: cls
    for cls in (
        Regist,
        Unregist,
        CreateTheme,
        CreateTopic,
        ListThemes,
        ListTopics,
        RemoveTheme,
        RemoveTopic,
        DestroyTopic,
        JoinTopic,
        LeaveTopic,
        Broadcast,
        Message,
        Stop,
        ListUsers,
    )
}


def create_command(name: str) -> Command:
    """Create the command named by a request line, ignoring case.

    Raises CommandError with BAD_COMMAND for an unknown name.
    """
    key = name[:-1] if name.endswith(LF) else name
    cls: Optional[type[Command]] = _COMMANDS.get(key.upper())
    if cls is None:
        raise CommandError(Status.BAD_COMMAND)
    return cls()