import pytest

from topicreg.status import (
    UNKNOWN_DESCRIPTION,
    ErrorCode,
    Status,
    command_error,
    describe,
)


def test_ok_description():
    assert describe(Status.OK) == "Status ok"


def test_unreachable_owner_code_and_text():
    assert describe(502) == "Unreachable topic owner"


def test_command_error_theme_inexistent():
    assert describe(command_error(ErrorCode.THEME_INEXISTENT)) == "Inexistent theme"


def test_unknown_code_falls_back():
    assert describe(-12345) == UNKNOWN_DESCRIPTION


def test_inconsistent_db_has_no_description():
    assert describe(command_error(ErrorCode.INCONSISTENT_DB)) == UNKNOWN_DESCRIPTION


@pytest.mark.parametrize(
    "name, expected",
    [
        ("THEME_INEXISTENT", "Inexistent theme"),
        ("THEME_DUPLICATE", "Duplicated theme"),
        ("THEME_NOT_EMPTY", "Can't remove a theme with topics"),
        ("THEME_NAME_TOO_BIG", "Theme name too big"),
        ("TOPIC_INEXISTENT", "Inexistent topic"),
        ("TOPIC_DUPLICATE", "Duplicated topic"),
        ("TOPIC_NOT_EMPTY", "Can't remove a topic with joiners"),
        ("TOPIC_NAME_TOO_BIG", "Topic name too big"),
        ("TOPIC_DUPLICATE_JOINER", "user already belongs to topic"),
        ("TOPIC_OWNER_NOT_LAST", "Owner must be the last topic user"),
        ("TOPIC_USER_NOT_JOINER", "User must belong to the group"),
        ("TOPIC_NO_TOPICS", "There are no topics in theme"),
        ("TOPIC_TOO_MANY_JOINERS", "Limit of topic joiners achieved"),
        ("TOPIC_USER_ALONE", "No broadcast when alone on a group"),
        ("USER_INEXISTENT", "Unknown user"),
        ("USER_DUPLICATE", "User already registered"),
        ("USER_NOT_THEME_OWNER", "User must be the theme onwer"),
        ("USER_NOT_TOPIC_OWNER", "User must be the topic onwer"),
        ("USER_NAME_TOO_BIG", "User name too big"),
        ("USER_PASS_TOO_BIG", "User pass too big"),
        ("USER_NOT_EMPTY", "User belongs or is a topic owner"),
        ("SEND_NOT_A_TOPIC_JOINER", "Sender is not a topic joiner"),
        ("DEST_NOT_A_TOPIC_JOINER", "Destination is not a topic joiner"),
    ],
)
def test_every_error_code_is_described(name, expected):
    assert describe(command_error(ErrorCode[name])) == expected


def test_unknown_user_shares_text():
    assert describe(Status.UNKNOWN_USER) == describe(
        command_error(ErrorCode.USER_INEXISTENT)
    )


def test_command_errors_do_not_collide_with_fixed_statuses():
    fixed = {int(s) for s in Status if s is not Status.COMMAND_ERROR}
    errors = {command_error(c) for c in ErrorCode}
    assert fixed & errors == set()


def test_command_error_is_offset_from_base():
    for code in ErrorCode:
        assert command_error(code) - Status.COMMAND_ERROR == code