"""Per-connection sessions holding the transient topics of a user."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Protocol

log = logging.getLogger(__name__)


class _SessionCloser(Protocol):
    def leave_on_close(self, topic: Any, user: Any) -> None: ...

    def remove_on_close(self, topic: Any, user: Any) -> None: ...


def _discard(topics: list[Any], topic: Any) -> bool:
    for position, entry in enumerate(topics):
        if entry is topic:
            del topics[position]
            return True
    return False


@dataclass(eq=False)
class UserSession:
    """The user of a connection and the transient topics it created or joined."""

    user: Any
    channel: Hashable
    created_topics: list[Any] = field(default_factory=list)
    joined_topics: list[Any] = field(default_factory=list)

    def add_topic(self, topic: Any) -> None:
        """Record a transient topic created in this session."""
        log.debug("created transient topic %s for user %s", topic.name, self.user.name)
        self.created_topics.append(topic)

    def remove_topic(self, topic: Any) -> bool:
        """Forget a created topic; return whether it was recorded."""
        log.debug("remove transient topic %s for user %s", topic.name, self.user.name)
        return _discard(self.created_topics, topic)

    def join_topic(self, topic: Any) -> None:
        """Record a topic joined in this session."""
        log.debug("topic %s joined for user %s", topic.name, self.user.name)
        self.joined_topics.append(topic)

    def leave_topic(self, topic: Any) -> bool:
        """Forget a joined topic; return whether it was recorded."""
        log.debug("leave joined topic %s for user %s", topic.name, self.user.name)
        return _discard(self.joined_topics, topic)


class SessionRegistry:
    """Sessions indexed by the connection they belong to."""

    def __init__(self) -> None:
        self._sessions: dict[Hashable, UserSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self):
        return iter(self._sessions.values())

    def find(self, channel: Hashable) -> UserSession | None:
        """Return the session of ``channel``, or None."""
        return self._sessions.get(channel)

    def get(self, channel: Hashable, user: Any) -> UserSession:
        """Return the session of ``channel``, creating one for ``user`` if needed."""
        session = self._sessions.get(channel)
        if session is None:
            session = UserSession(user, channel)
            self._sessions[channel] = session
        return session

    def destroy(self, session: UserSession, repository: _SessionCloser) -> None:
        """Leave joined topics, remove created ones and drop the session."""
        log.debug("leave joined topics for %s", session.user.name)
        for topic in list(session.joined_topics):
            repository.leave_on_close(topic, session.user)
        log.debug("destroy created topics for %s", session.user.name)
        for topic in list(session.created_topics):
            repository.remove_on_close(topic, session.user)
        if self._sessions.get(session.channel) is session:
            del self._sessions[session.channel]

    def users(self) -> list[Any]:
        """Users of the current sessions, in the order the sessions began."""
        return [session.user for session in self._sessions.values()]