from topicreg.commands import CommandType
from topicreg.repository import NamesResult
from topicreg.responses import Answer, build_response, status_response
from topicreg.status import ErrorCode, Status, command_error


def test_status_ok():
    assert status_response(Status.OK) == "200 Status ok\n\n"


def test_status_error():
    status = command_error(ErrorCode.THEME_INEXISTENT)
    assert status_response(status) == f"{status} Inexistent theme\n\n"


def test_status_unknown():
    assert status_response(999) == "999 Unkown error\n\n"


def test_list_response():
    names = NamesResult(2, "john 1\nmary 2\n")
    text = build_response(Answer(Status.OK, names=names), CommandType.LIST_USERS)
    assert text == "200 Status ok\njohn 1\nmary 2\n\n"


def test_empty_list_has_no_content():
    text = build_response(Answer(Status.OK, names=NamesResult(0)), CommandType.LIST_THEMES)
    assert text == status_response(Status.OK)


def test_join_response():
    text = build_response(Answer(Status.OK, njoiners=3), CommandType.JOIN_TOPIC)
    assert text == "200 Status ok\n3\n\n"


def test_leave_response():
    text = build_response(Answer(Status.OK, njoiners=1), CommandType.LEAVE_TOPIC)
    assert text.splitlines()[1] == "1"


def test_create_topic_duplicate_names_owner():
    status = command_error(ErrorCode.TOPIC_DUPLICATE)
    text = build_response(Answer(status, username="john"), CommandType.CREATE_TOPIC)
    assert text == f"{status} Duplicated topic\njohn\n\n"


def test_other_commands_only_status():
    answer = Answer(Status.OK, njoiners=4)
    assert build_response(answer, CommandType.REGIST) == status_response(Status.OK)