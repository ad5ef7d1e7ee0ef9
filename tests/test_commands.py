import pytest

from topicreg.commands import (
    MAX_BCAST_MSG_LINES,
    Broadcast,
    CommandError,
    CommandType,
    CreateTheme,
    CreateTopic,
    JoinTopic,
    ListUsers,
    Message,
    Regist,
    create_command,
)
from topicreg.repository import Repository
from topicreg.status import Status


@pytest.fixture
def repo():
    repository = Repository()
    repository.user_create("john", "password", 1)
    repository.user_create("mary", "password", 2)
    return repository


AUTH = "john password\n"


def test_create_command_ignores_case():
    cmd = create_command("regist\n")
    assert isinstance(cmd, Regist)
    assert cmd.type == CommandType.REGIST


def test_create_command_list_users():
    assert create_command("LIST_USERS\n").type == CommandType.LIST_USERS


def test_unknown_command():
    with pytest.raises(CommandError) as info:
        create_command("HELLO\n")
    assert info.value.status == Status.BAD_COMMAND


def test_command_error_message():
    assert str(CommandError(Status.BAD_COMMAND_ARGS)) == "Invalid command arguments"


def test_regist_arguments(repo):
    cmd = create_command("REGIST\n")
    assert cmd.read_args("7 alice password\n", repo) is True
    assert (cmd.number, cmd.username, cmd.passwd) == (7, "alice", "password")
    assert cmd.read_args("\n", repo) is False


@pytest.mark.parametrize("line", ["0 alice password\n", "abc alice password\n",
                                  "7 alice\n", "7 alice password extra\n"])
def test_regist_bad_arguments(repo, line):
    with pytest.raises(CommandError) as info:
        create_command("REGIST\n").read_args(line, repo)
    assert info.value.status == Status.BAD_COMMAND_ARGS


def test_bad_authentication(repo):
    with pytest.raises(CommandError) as info:
        CreateTheme().read_args("john wrong\n", repo)
    assert info.value.status == Status.BAD_USER_AUTH


def test_too_long_user_name(repo):
    with pytest.raises(CommandError) as info:
        CreateTheme().read_args("j" * 31 + " password\n", repo)
    assert info.value.status == Status.BAD_USER_AUTH


def test_create_theme(repo):
    cmd = create_command("create_theme\n")
    assert cmd.read_args(AUTH, repo) is True
    assert cmd.user is repo.user_search("john")
    assert cmd.read_args("music\n", repo) is True
    assert cmd.theme == "music"
    assert cmd.read_args("\n", repo) is False


def test_extra_line_after_arguments(repo):
    cmd = CreateTheme()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music\n", repo)
    with pytest.raises(CommandError) as info:
        cmd.read_args("more\n", repo)
    assert info.value.status == Status.BAD_COMMAND


def test_create_topic_with_limit(repo):
    cmd = CreateTopic()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz 5\n", repo)
    cmd.read_args("4000\n", repo)
    assert (cmd.theme, cmd.topic, cmd.limit, cmd.port) == ("music", "jazz", 5, 4000)
    assert cmd.argline == 3


def test_create_topic_without_limit(repo):
    cmd = CreateTopic()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz\n", repo)
    assert cmd.limit == 0
    assert cmd.topic == "jazz"


def test_create_topic_bad_limit(repo):
    cmd = CreateTopic()
    cmd.read_args(AUTH, repo)
    with pytest.raises(CommandError) as info:
        cmd.read_args("music jazz none\n", repo)
    assert info.value.status == Status.BAD_COMMAND_ARGS


def test_join_topic_bad_port(repo):
    cmd = JoinTopic()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz\n", repo)
    with pytest.raises(CommandError) as info:
        cmd.read_args("0\n", repo)
    assert info.value.status == Status.BAD_COMMAND_ARGS


def test_broadcast_collects_lines(repo):
    cmd = Broadcast()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz\n", repo)
    assert cmd.read_args("\n", repo) is True
    assert cmd.read_args("hello\n", repo) is True
    assert cmd.read_args("\n", repo) is False
    assert cmd.lines == ["\n", "hello\n"]


def test_broadcast_line_limit(repo):
    cmd = Broadcast()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz\n", repo)
    for _ in range(MAX_BCAST_MSG_LINES):
        cmd.read_args("x\n", repo)
    with pytest.raises(CommandError):
        cmd.read_args("x\n", repo)
    assert len(cmd.lines) == MAX_BCAST_MSG_LINES


def test_message_destination(repo):
    cmd = Message()
    cmd.read_args(AUTH, repo)
    cmd.read_args("music jazz mary\n", repo)
    cmd.read_args("hi\n", repo)
    assert (cmd.user_dest, cmd.lines) == ("mary", ["hi\n"])


def test_list_users_rejects_arguments(repo):
    with pytest.raises(CommandError) as info:
        ListUsers().read_args("john\n", repo)
    assert info.value.status == Status.BAD_COMMAND


def test_stop_ends_on_empty_line(repo):
    assert create_command("STOP\n").read_args("\n", repo) is False