# topicreg

A registration server for themed chat groups. Clients connect over TCP to
register users, create themes, open topics inside those themes, and join or
leave them. The server records who belongs to each topic and sends UDP
datagrams to the people involved: it tells a topic's owner when someone
enters or leaves, relays broadcasts to every other joiner of a topic, and
delivers direct messages between two joiners.

Topics are transient. Each belongs to the connection that created it. When a
connection closes, the server leaves every topic that connection joined and
removes every topic it created. The owner of a left topic gets a
`LEAVE_PARTNER` notice, and the remaining joiners of a removed topic get
`TOPIC_DESTROYED`.

## Running the server

```
topicreg-server --port 9000
```

Options:

- `--port PORT`: the TCP port to listen on. This option is required.
- `--host HOST`: the address to listen on. The default is `0.0.0.0`.
- `-v`, `--verbose`: log debugging detail about commands, sessions and
  messages.

Notices are sent from a UDP socket bound to port 30001. To choose a different
port, pass `udp_host` and `udp_port` to `RegistrationServer`.

The `STOP` command marks the server as stopping. From then on it refuses new
connections, and it exits once the last open connection has closed. If the
server cannot listen, the command prints `Listen error ...` and exits with
status 1.

## Protocol

A request is a series of text lines, each ending in `\n`. Any `\r` is
dropped, and characters beyond 511 on a line are ignored. The first line
names the command, in any case. Argument lines follow, and an empty line
(blank apart from spaces or tabs) ends the request. Most commands take a
login line, `<name> <password>`, as their first argument line.

```
CREATE_THEME
alice password
music

```

| Command         | Argument lines                                                     |
|-----------------|--------------------------------------------------------------------|
| `REGIST`        | `<number> <name> <password>` (no login line)                        |
| `UNREGIST`      | login                                                              |
| `LIST_THEMES`   | login                                                              |
| `CREATE_THEME`  | login, `<theme>`                                                   |
| `REMOVE_THEME`  | login, `<theme>`                                                   |
| `LIST_TOPICS`   | login, `<theme>`                                                   |
| `LIST_USERS`    | none                                                               |
| `CREATE_TOPIC`  | login, `<theme> <topic> [<limit>]`, `<udp port>`                    |
| `REMOVE_TOPIC`  | login, `<theme> <topic>`                                           |
| `DESTROY_TOPIC` | login, `<theme> <topic>`                                           |
| `JOIN_TOPIC`    | login, `<theme> <topic>`, `<udp port>`                              |
| `LEAVE_TOPIC`   | login, `<theme> <topic>`                                           |
| `BROADCAST`     | login, `<theme> <topic>`, up to 32 message lines                    |
| `MESSAGE`       | login, `<theme> <topic> <destination user>`, up to 32 message lines |
| `STOP`          | none                                                               |

Numbers, limits and ports must be positive. Names are limited to 32
characters and passwords to 16.

A reply starts with a status line, `<code> <description>`. Some replies add
content lines, and an empty line always ends the reply.

- `200 Status ok`: success.
- `400`: unknown command. `401`: bad arguments. `403`: bad login.
- `300 + code`: the request was refused. For example, `341 Inexistent theme`,
  `312 Duplicated topic`, or `319 Limit of topic joiners achieved`. The codes
  are listed in `topicreg.status.ErrorCode`.
- `502 Unreachable topic owner`: the notice to the topic owner could not be
  sent.

A malformed request is skipped up to its terminating empty line, and then
the error is returned.

Content of replies:

- `LIST_THEMES`: one line per theme, `<theme> <owner> <number of topics>`.
- `LIST_TOPICS`: one line per topic, `<topic> <owner> <other joiners...> <count>`.
- `LIST_USERS`: one line per user, `<name> <number>`.
- `JOIN_TOPIC`, `LEAVE_TOPIC`: the number of joiners after the change.
- `CREATE_TOPIC` refused: the name of the existing topic's owner (empty when
  there is none), then the requested port.

## Datagrams

Datagrams go to the host of the client's TCP connection, at the UDP port that
client gave when it created or joined the topic.

- `ENTER_PARTNER` and `LEAVE_PARTNER`, sent to the topic owner:
  `<user> <theme> <topic> <joiners>`.
- `BROADCAST`, sent to every other joiner: a header
  `<sender> <theme> <topic> <recipients>`, then the message lines.
- `TOPIC_DESTROYED`, sent to every other joiner of a destroyed topic.
- `MESSAGE`, sent to one joiner: `<sender> <theme> <topic> <destination>`,
  then the message lines.

## Using the library

Requests can be processed without a network connection:

```python
from topicreg.server import RegistrationServer

server = RegistrationServer()
channel = server.open_channel("127.0.0.1")
outcomes = server.handle_data(channel, b"REGIST\n1 alice password\n\n")
print(outcomes[0].response)   # "200 Status ok\n\n"
server.close_channel(channel)
```

Modules:

- `topicreg.status`: limits, `ErrorCode`, `Status`, `describe`, `command_error`.
- `topicreg.strutils`: word and line-end parsing (`next_word`, `check_empty_line`).
- `topicreg.repository`: `Repository` of users, themes, topics and joiners.
  A refused operation raises `RepositoryError`.
- `topicreg.sessions`: `SessionRegistry` and `UserSession`.
- `topicreg.commands`: command classes and `create_command`. Bad input raises
  `CommandError`.
- `topicreg.responses`: `Answer`, `status_response`, `build_response`.
- `topicreg.notices`: `Datagram` and the functions that build notices.
- `topicreg.executor`: `CommandExecutor`, which turns each command into an
  `Outcome`.
- `topicreg.channel`: `Channel`, the per-connection line reader and its
  `State`.
- `topicreg.server`: `RegistrationServer` and `main`.

## Limitations

- All data is held in memory and is lost when the server stops. Every topic
  is transient.
- Passwords are stored and compared as given, without hashing.
- Datagrams are sent without waiting for a reply, so a notice can be lost
  without the server knowing.

## Tests

```
pip install -e ".[test]"
pytest
```