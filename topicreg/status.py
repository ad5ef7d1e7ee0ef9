"""Protocol limits, repository error codes and response status codes."""

from __future__ import annotations

from enum import IntEnum

MAX_USER_NAME = 32
MAX_THEME_NAME = 32
MAX_TOPIC_NAME = 32
MAX_PASSWORD_SIZE = 16
PASSWD_HASH_SIZE = 256
MAX_IP_ADDRESS = 16

UNKNOWN_DESCRIPTION = "Unkown error"


class ErrorCode(IntEnum):
    """Reasons a repository operation is refused."""

    # topics
    TOPIC_INEXISTENT = 11
    TOPIC_DUPLICATE = 12
    TOPIC_NOT_EMPTY = 13
    TOPIC_NAME_TOO_BIG = 14
    TOPIC_DUPLICATE_JOINER = 15
    TOPIC_OWNER_NOT_LAST = 16
    TOPIC_USER_NOT_JOINER = 17
    TOPIC_NO_TOPICS = 18
    TOPIC_TOO_MANY_JOINERS = 19
    TOPIC_USER_ALONE = 20
    # users
    USER_INEXISTENT = 21
    USER_DUPLICATE = 22
    USER_NOT_THEME_OWNER = 23
    USER_NOT_TOPIC_OWNER = 24
    USER_NAME_TOO_BIG = 25
    USER_PASS_TOO_BIG = 26
    USER_NOT_EMPTY = 27
    SEND_NOT_A_TOPIC_JOINER = 28
    DEST_NOT_A_TOPIC_JOINER = 29
    # general
    INCONSISTENT_DB = 31
    # themes
    THEME_INEXISTENT = 41
    THEME_DUPLICATE = 42
    THEME_NOT_EMPTY = 43
    THEME_NAME_TOO_BIG = 44


class Status(IntEnum):
    """Status codes sent at the head of every response.

    COMMAND_ERROR is the base added to an ErrorCode to form the status
    of a refused repository operation.
    """

    OK = 200
    COMMAND_ERROR = 300
    BAD_COMMAND = 400
    BAD_COMMAND_ARGS = 401
    UNKNOWN_USER = 402
    BAD_USER_AUTH = 403
    SERVER_ERROR = 500
    UNREACHABLE_TOPIC_OWNER = 502


def command_error(code: int) -> int:
    """Return the response status for a refused repository operation."""
    return int(Status.COMMAND_ERROR) + int(code)


_TABLE: list[tuple[int, str]] = [
    (Status.OK, "Status ok"),
    (Status.BAD_COMMAND, "Invalid command"),
    (Status.BAD_COMMAND_ARGS, "Invalid command arguments"),
    (command_error(ErrorCode.THEME_INEXISTENT), "Inexistent theme"),
    (command_error(ErrorCode.THEME_DUPLICATE), "Duplicated theme"),
    (command_error(ErrorCode.THEME_NOT_EMPTY), "Can't remove a theme with topics"),
    (command_error(ErrorCode.THEME_NAME_TOO_BIG), "Theme name too big"),
    (command_error(ErrorCode.TOPIC_INEXISTENT), "Inexistent topic"),
    (command_error(ErrorCode.TOPIC_DUPLICATE), "Duplicated topic"),
    (command_error(ErrorCode.TOPIC_NOT_EMPTY), "Can't remove a topic with joiners"),
    (command_error(ErrorCode.TOPIC_NAME_TOO_BIG), "Topic name too big"),
    (command_error(ErrorCode.TOPIC_OWNER_NOT_LAST), "Owner must be the last topic user"),
    (command_error(ErrorCode.TOPIC_NO_TOPICS), "There are no topics in theme"),
    (command_error(ErrorCode.TOPIC_DUPLICATE_JOINER), "user already belongs to topic"),
    (command_error(ErrorCode.TOPIC_TOO_MANY_JOINERS), "Limit of topic joiners achieved"),
    (command_error(ErrorCode.TOPIC_USER_ALONE), "No broadcast when alone on a group"),
    (Status.UNKNOWN_USER, "Unknown user"),
    (Status.BAD_USER_AUTH, "Bad user authentication"),
    (command_error(ErrorCode.USER_INEXISTENT), "Unknown user"),
    (command_error(ErrorCode.USER_DUPLICATE), "User already registered"),
    (command_error(ErrorCode.TOPIC_USER_NOT_JOINER), "User must belong to the group"),
    (command_error(ErrorCode.USER_NOT_THEME_OWNER), "User must be the theme onwer"),
    (command_error(ErrorCode.USER_NOT_TOPIC_OWNER), "User must be the topic onwer"),
    (command_error(ErrorCode.USER_NAME_TOO_BIG), "User name too big"),
    (command_error(ErrorCode.USER_PASS_TOO_BIG), "User pass too big"),
    (command_error(ErrorCode.USER_NOT_EMPTY), "User belongs or is a topic owner"),
    (command_error(ErrorCode.SEND_NOT_A_TOPIC_JOINER), "Sender is not a topic joiner"),
    (command_error(ErrorCode.DEST_NOT_A_TOPIC_JOINER), "Destination is not a topic joiner"),
    (Status.UNREACHABLE_TOPIC_OWNER, "Unreachable topic owner"),
    (Status.SERVER_ERROR, "Internal server error"),
]

_DESCRIPTIONS: dict[int, str] = {}
for _code, _text in _TABLE:
    _DESCRIPTIONS.setdefault(int(_code), _text)


def describe(code: int) -> str:
    """Return the text that accompanies a status code in a response."""
    return _DESCRIPTIONS.get(int(code), UNKNOWN_DESCRIPTION)