"""Per-connection state machine assembling requests from protocol lines."""

from __future__ import annotations

import codecs
import logging
from enum import Enum, auto
from typing import Any, Iterator, Optional, Union

from .commands import Command, CommandError, create_command
from .strutils import CR, LF, check_empty_line

log = logging.getLogger(__name__)

BUFFER_SIZE = 4096
MAX_LINE = 512

Request = Union[Command, CommandError]


class State(Enum):
    """Where a connection stands in reading a request."""

    GET_COMMAND = auto()
    AUTHENTICATE = auto()
    GET_PARMS = auto()
    EXECUTE = auto()
    ERROR = auto()
    COMPLETED = auto()


class Channel:
    """The reading side of one client connection.

    Data is fed as it arrives; every request completed by it is returned,
    either as a Command ready to run or as the CommandError to report.
    A rejected request is reported once its terminating empty line arrives.
    """

    def __init__(self, repository: Any, peer_host: str = "") -> None:
        self.repository = repository
        self.peer_host = peer_host
        self.state = State.GET_COMMAND
        self.command: Optional[Command] = None
        self.error: Optional[int] = None
        self._partial: list[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: Union[bytes, str]) -> list[Request]:
        """Consume received data and return the requests it completes."""
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        requests = []
        for line in self._complete_lines(text):
            request = self._handle_line(line)
            if request is not None:
                requests.append(request)
        return requests

    def _complete_lines(self, text: str) -> Iterator[str]:
        for ch in text:
            if ch == LF:
                line = "".join(self._partial) + LF
                self._partial = []
                yield line
            elif ch != CR and len(self._partial) < MAX_LINE - 1:
                self._partial.append(ch)

    def _fail(self, status: int) -> None:
        self.state = State.ERROR
        self.error = status
        self.command = None

    def _ready(self) -> Command:
        self.state = State.EXECUTE
        command = self.command
        self.command = None
        self.state = State.GET_COMMAND
        assert command is not None
        return command

    def _handle_line(self, line: str) -> Optional[Request]:
        if self.state is State.ERROR:
            if not check_empty_line(line):
                return None
            status = self.error
            self.error = None
            self.state = State.GET_COMMAND
            return CommandError(status)

        if self.state is State.GET_COMMAND:
            try:
                self.command = create_command(line)
            except CommandError as error:
                self._fail(error.status)
                return None
            log.debug("command %s received!", line.rstrip(LF))
            self.state = State.GET_PARMS
            return None

        if self.state is State.GET_PARMS:
            log.debug("args received: %s", line.rstrip(LF))
            if check_empty_line(line):
                return self._ready()
            assert self.command is not None
            try:
                more = self.command.read_args(line, self.repository)
            except CommandError as error:
                self._fail(error.status)
                return None
            if not more:
                return self._ready()
        return None