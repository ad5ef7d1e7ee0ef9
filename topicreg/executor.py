"""Carrying out assembled commands against the repository and sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Optional

from .commands import (
    Broadcast,
    Command,
    CommandType,
    CreateTopic,
    DestroyTopic,
    JoinTopic,
    LeaveTopic,
    Message,
)
from .notices import Datagram, direct_message, enter_partner, leave_partner, to_partners
from .repository import JoinerInfo, Repository, RepositoryError, Topic
from .responses import Answer, build_response, status_response
from .sessions import SessionRegistry, UserSession
from .status import Status

log = logging.getLogger(__name__)


@dataclass
class Outcome:
    """What a command produced.

    ``response`` is written back on the client connection once the
    ``datagrams`` are sent; ``failure_response`` replaces it when they
    cannot be delivered. ``stop`` asks the server to stop.
    """

    response: Optional[str]
    datagrams: list[Datagram] = field(default_factory=list)
    failure_response: Optional[str] = None
    stop: bool = False


_OK = status_response(Status.OK)


class CommandExecutor:
    """Runs commands for the connections of the registration service."""

    def __init__(self) -> None:
        self._pending: list[Datagram] = []
        self.repository = Repository(
            warn_partners=self._warn_partners, warn_owner=self._warn_owner
        )
        self.sessions = SessionRegistry()
        self.stopped = False
        self._handlers: dict[CommandType, Callable[[Any, Hashable, str], Outcome]] = {
            CommandType.REGIST: self._regist,
            CommandType.UNREGIST: self._unregist,
            CommandType.CREATE_THEME: self._create_theme,
            CommandType.CREATE_TOPIC: self._create_topic,
            CommandType.LIST_THEMES: self._list_themes,
            CommandType.LIST_TOPICS: self._list_topics,
            CommandType.LIST_USERS: self._list_users,
            CommandType.REMOVE_THEME: self._remove_theme,
            CommandType.REMOVE_TOPIC: self._remove_topic,
            CommandType.DESTROY_TOPIC: self._destroy_topic,
            CommandType.JOIN_TOPIC: self._join_topic,
            CommandType.LEAVE_TOPIC: self._leave_topic,
            CommandType.BROADCAST: self._broadcast,
            CommandType.MESSAGE: self._message,
            CommandType.STOP: self._stop,
        }

    # notifications raised by the repository when a connection closes

    def _warn_partners(self, topic: Topic, joiners: list[JoinerInfo]) -> None:
        self._pending.extend(
            to_partners(
                "TOPIC_DESTROYED", topic.owner.name, topic.theme.name, topic.name, [], joiners
            )
        )

    def _warn_owner(self, topic: Topic, owner_info: JoinerInfo, njoiners: int) -> None:
        self._pending.append(
            leave_partner(
                topic.owner.name, topic.theme.name, topic.name, njoiners, owner_info.address
            )
        )

    # public interface

    def execute(self, command: Command, channel: Hashable, peer_host: str) -> Outcome:
        """Run ``command`` for the connection ``channel`` from ``peer_host``."""
        handler = self._handlers.get(command.type)
        if handler is None:
            return Outcome(None)
        try:
            return handler(command, channel, peer_host)
        except RepositoryError as error:
            return Outcome(status_response(error.status))

    def close_channel(self, channel: Hashable) -> list[Datagram]:
        """Drop the session of a closed connection; return the notices it causes."""
        session = self.sessions.find(channel)
        if session is not None:
            self.sessions.destroy(session, self.repository)
        pending, self._pending = self._pending, []
        return pending

    # handlers

    def _session(self, channel: Hashable, command: Command) -> UserSession:
        return self.sessions.get(channel, command.user)

    def _regist(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        self.repository.user_create(command.username, command.passwd, command.number)
        return Outcome(_OK)

    def _unregist(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        self.repository.user_remove(command.user)
        return Outcome(_OK)

    def _create_theme(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        self.repository.theme_create(command.theme, command.user)
        return Outcome(_OK)

    def _create_topic(self, command: CreateTopic, channel: Hashable, peer_host: str) -> Outcome:
        if command.argline != 3:
            return Outcome(status_response(Status.BAD_COMMAND_ARGS))
        session = self._session(channel, command)
        try:
            self.repository.topic_create(
                command.theme, command.topic, (peer_host, command.port), session
            )
        except RepositoryError as error:
            answer = Answer(error.status, njoiners=command.port, username=error.owner or "")
            return Outcome(build_response(answer, CommandType.CREATE_TOPIC))
        return Outcome(_OK)

    def _listing(self, names: Any, command_type: CommandType) -> Outcome:
        return Outcome(build_response(Answer(Status.OK, names=names), command_type))

    def _list_themes(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        return self._listing(self.repository.themes_collection(), CommandType.LIST_THEMES)

    def _list_topics(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        names = self.repository.topics_collection(command.theme)
        return self._listing(names, CommandType.LIST_TOPICS)

    def _list_users(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        return self._listing(self.repository.users_collection(), CommandType.LIST_USERS)

    def _remove_theme(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        self.repository.theme_remove(command.theme, command.user)
        return Outcome(_OK)

    def _remove_topic(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        session = self._session(channel, command)
        self.repository.topic_remove(command.theme, command.topic, session)
        return Outcome(_OK)

    def _join_topic(self, command: JoinTopic, channel: Hashable, peer_host: str) -> Outcome:
        session = self._session(channel, command)
        address = (peer_host, command.port)
        njoiners = self.repository.topic_join(command.theme, command.topic, address, session)
        log.debug("address %s,%d join to topic %s", peer_host, command.port, command.topic)
        owner = self.repository.topic_owner_info(command.theme, command.topic)
        command.njoiners = njoiners
        notice = enter_partner(
            command.user.name, command.theme, command.topic, njoiners, owner.address
        )
        answer = Answer(Status.OK, njoiners=njoiners)
        return Outcome(
            build_response(answer, CommandType.JOIN_TOPIC),
            [notice],
            failure_response=status_response(Status.UNREACHABLE_TOPIC_OWNER),
        )

    def _leave_topic(self, command: LeaveTopic, channel: Hashable, peer_host: str) -> Outcome:
        session = self._session(channel, command)
        njoiners = self.repository.topic_leave(command.theme, command.topic, session)
        owner = self.repository.topic_owner_info(command.theme, command.topic)
        command.njoiners = njoiners
        notice = leave_partner(
            command.user.name, command.theme, command.topic, njoiners, owner.address
        )
        answer = Answer(Status.OK, njoiners=njoiners)
        return Outcome(
            build_response(answer, CommandType.LEAVE_TOPIC),
            [notice],
            failure_response=status_response(Status.UNREACHABLE_TOPIC_OWNER),
        )

    def _broadcast(self, command: Broadcast, channel: Hashable, peer_host: str) -> Outcome:
        joiners = self.repository.topic_joiners(command.theme, command.topic, command.user)
        datagrams = to_partners(
            "BROADCAST", command.user.name, command.theme, command.topic, command.lines, joiners
        )
        return Outcome(_OK, datagrams)

    def _message(self, command: Message, channel: Hashable, peer_host: str) -> Outcome:
        dest = self.repository.topic_joiner_search(
            command.theme, command.topic, command.user, command.user_dest
        )
        notice = direct_message(
            command.user.name,
            command.theme,
            command.topic,
            command.user_dest,
            command.lines,
            dest.address,
        )
        return Outcome(_OK, [notice])

    def _destroy_topic(self, command: DestroyTopic, channel: Hashable, peer_host: str) -> Outcome:
        joiners = self.repository.topic_joiners(command.theme, command.topic, command.user)
        session = self._session(channel, command)
        self.repository.topic_destroy(command.theme, command.topic, session)
        datagrams = to_partners(
            "TOPIC_DESTROYED", command.user.name, command.theme, command.topic, [], joiners
        )
        return Outcome(_OK, datagrams)

    def _stop(self, command: Any, channel: Hashable, peer_host: str) -> Outcome:
        self.stopped = True
        return Outcome(_OK, stop=True)