import socket
import threading

import pytest

from topicreg.server import RegistrationServer, main


def _run(server, channel, text):
    return server.handle_data(channel, text.encode())


def test_regist_response_and_user_stored():
    server = RegistrationServer()
    channel = server.open_channel("10.0.0.1")
    outcomes = _run(server, channel, "REGIST\n1 ann password\n\n")
    assert [o.response for o in outcomes] == ["200 Status ok\n\n"]
    assert server.executor.repository.user_search("ann").number == 1


def test_bad_command_response():
    server = RegistrationServer()
    channel = server.open_channel("10.0.0.1")
    outcomes = _run(server, channel, "NOPE\n\n")
    assert [o.response for o in outcomes] == ["400 Invalid command\n\n"]


def test_stop_refuses_new_connections():
    server = RegistrationServer()
    channel = server.open_channel("10.0.0.1")
    outcomes = _run(server, channel, "STOP\n\n")
    assert outcomes[0].stop
    assert server.terminated
    with pytest.raises(ConnectionRefusedError):
        server.open_channel("10.0.0.2")
    assert not server.finished
    server.close_channel(channel)
    assert server.finished


def test_join_and_close_notify_owner():
    server = RegistrationServer()
    setup = server.open_channel("10.0.0.9")
    _run(server, setup, "REGIST\n1 ann password\n\nREGIST\n2 bob password\n\n")
    owner = server.open_channel("10.0.0.1")
    created = _run(
        server,
        owner,
        "CREATE_THEME\nann password\nt\n\nCREATE_TOPIC\nann password\nt x\n5000\n\n",
    )
    assert [o.response for o in created] == ["200 Status ok\n\n"] * 2
    joiner = server.open_channel("10.0.0.2")
    joined = _run(server, joiner, "JOIN_TOPIC\nbob password\nt x\n6000\n\n")
    notice = joined[0].datagrams[0]
    assert notice.text == "ENTER_PARTNER\nbob t x 2\n\n"
    assert notice.address == ("10.0.0.1", 5000)
    closing = server.close_channel(joiner)
    assert len(closing) == 1
    assert closing[0].text.startswith("LEAVE_PARTNER\n")
    assert closing[0].address == ("10.0.0.1", 5000)
    assert server.executor.repository.topic_search("t", "x").njoiners == 1


def test_serve_stops_after_stop_request():
    server = RegistrationServer(udp_host="127.0.0.1", udp_port=0)
    thread = threading.Thread(target=server.serve, args=("127.0.0.1", 0), daemon=True)
    thread.start()
    assert server.ready.wait(5)
    with socket.create_connection(server.address[:2], timeout=5) as sock:
        sock.sendall(b"STOP\n\n")
        received = b""
        while not received.endswith(b"\n\n"):
            chunk = sock.recv(1024)
            if not chunk:
                break
            received += chunk
    assert received == b"200 Status ok\n\n"
    thread.join(5)
    assert not thread.is_alive()


def test_main_requires_port():
    with pytest.raises(SystemExit):
        main([])