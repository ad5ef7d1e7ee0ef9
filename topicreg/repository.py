"""In-memory store of users, themes and topics with their joiners."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .status import (
    MAX_PASSWORD_SIZE,
    MAX_THEME_NAME,
    MAX_TOPIC_NAME,
    MAX_USER_NAME,
    ErrorCode,
    command_error,
    describe,
)

log = logging.getLogger(__name__)

Address = Any

WarnPartners = Callable[["Topic", list["JoinerInfo"]], None]
WarnOwner = Callable[["Topic", "JoinerInfo", int], None]


class RepositoryError(Exception):
    """A repository operation was refused.

    ``code`` is the ErrorCode; ``owner`` is set to the owner's name when a
    topic with the requested name already exists.
    """

    def __init__(self, code: ErrorCode, owner: Optional[str] = None) -> None:
        self.code = ErrorCode(code)
        self.owner = owner
        super().__init__(describe(command_error(self.code)))

    @property
    def status(self) -> int:
        """The response status that reports this error."""
        return command_error(self.code)


@dataclass(eq=False)
class User:
    """A registered user and the counts that keep it from being removed."""

    name: str
    passwd_hash: str
    number: int
    nthemes: int = 0
    ntopics: int = 0
    njoins: int = 0


@dataclass(eq=False)
class Theme:
    """A named group of topics owned by the user who created it."""

    name: str
    owner: User
    topics: list["Topic"] = field(default_factory=list)

    @property
    def ntopics(self) -> int:
        return len(self.topics)


@dataclass(eq=False)
class Topic:
    """A topic of a theme; its owner is always the first joiner."""

    name: str
    theme: Theme
    owner: User
    is_persistent: bool = False
    limit: int = 0
    joiners: list["TopicJoiner"] = field(default_factory=list)

    @property
    def njoiners(self) -> int:
        return len(self.joiners)


@dataclass(eq=False)
class TopicJoiner:
    """A user in a topic; transient topics record the user's session."""

    topic: Topic
    content: Any
    address: Address

    @property
    def user(self) -> User:
        if self.topic.is_persistent:
            return self.content
        return self.content.user

    @property
    def session(self) -> Any:
        return None if self.topic.is_persistent else self.content

    @property
    def name(self) -> str:
        return self.user.name


@dataclass
class JoinerInfo:
    """Name, number and messaging address of a topic joiner."""

    username: str
    number: int
    address: Address


@dataclass
class NamesResult:
    """A listing: how many entries and their text, one per line."""

    nresults: int
    text: str = ""

    @property
    def buf_size(self) -> int:
        return len(self.text)


def _find_joiner(topic: Topic, user: User) -> Optional[TopicJoiner]:
    return next((tj for tj in topic.joiners if tj.name == user.name), None)


def _find_topic(theme: Theme, name: str) -> Optional[Topic]:
    return next((t for t in theme.topics if t.name == name), None)


def _remove_identity(items: list, item: Any) -> None:
    for position, entry in enumerate(items):
        if entry is item:
            del items[position]
            return


class Repository:
    """Users, themes and topics of the registration service."""

    def __init__(
        self,
        warn_partners: Optional[WarnPartners] = None,
        warn_owner: Optional[WarnOwner] = None,
    ) -> None:
        self.users: list[User] = []
        self.themes: list[Theme] = []
        self._warn_partners = warn_partners
        self._warn_owner = warn_owner

    # themes

    def theme_search(self, name: str) -> Optional[Theme]:
        """Return the theme called ``name``, or None."""
        return next((t for t in self.themes if t.name == name), None)

    def _theme(self, name: str) -> Theme:
        theme = self.theme_search(name)
        if theme is None:
            raise RepositoryError(ErrorCode.THEME_INEXISTENT)
        return theme

    def _topic(self, theme_name: str, name: str) -> Topic:
        topic = _find_topic(self._theme(theme_name), name)
        if topic is None:
            raise RepositoryError(ErrorCode.TOPIC_INEXISTENT)
        return topic

    def theme_create(self, name: str, creator: User) -> Theme:
        """Create a theme owned by ``creator``."""
        if len(name) > MAX_THEME_NAME:
            raise RepositoryError(ErrorCode.THEME_NAME_TOO_BIG)
        if self.theme_search(name) is not None:
            raise RepositoryError(ErrorCode.THEME_DUPLICATE)
        theme = Theme(name, creator)
        self.themes.append(theme)
        creator.nthemes += 1
        return theme

    def theme_remove(self, name: str, remover: User) -> None:
        """Remove an empty theme; only its owner may do so."""
        theme = self._theme(name)
        if theme.owner is not remover:
            raise RepositoryError(ErrorCode.USER_NOT_THEME_OWNER)
        if theme.ntopics > 0:
            raise RepositoryError(ErrorCode.THEME_NOT_EMPTY)
        remover.nthemes -= 1
        _remove_identity(self.themes, theme)

    def themes_collection(self) -> NamesResult:
        """List every theme as ``name owner ntopics``."""
        text = "".join(
            f"{t.name} {t.owner.name} {t.ntopics}\n" for t in self.themes
        )
        return NamesResult(len(self.themes), text)

    # topics

    def topic_search(self, theme_name: str, topic_name: str) -> Optional[Topic]:
        """Return the topic of a theme, or None."""
        theme = self.theme_search(theme_name)
        if theme is None:
            return None
        return _find_topic(theme, topic_name)

    def _join_internal(self, topic: Topic, address: Address, session: Any) -> None:
        content = session.user if topic.is_persistent else session
        joiner = TopicJoiner(topic, content, address)
        topic.joiners.append(joiner)
        joiner.user.njoins += 1

    def _leave_internal(self, topic: Topic, user: User) -> None:
        joiner = _find_joiner(topic, user)
        if joiner is None:
            raise RepositoryError(ErrorCode.TOPIC_USER_NOT_JOINER)
        if not topic.is_persistent:
            joiner.session.leave_topic(topic)
        _remove_identity(topic.joiners, joiner)
        user.njoins -= 1

    def _internal_destroy(self, topic: Topic) -> None:
        if topic.is_persistent:
            return
        for joiner in list(topic.joiners):
            joiner.session.leave_topic(topic)

    def _fill_joiners(self, topic: Topic, user: User) -> list[JoinerInfo]:
        return [
            JoinerInfo(tj.name, tj.user.number, tj.address)
            for tj in topic.joiners
            if tj.user is not user
        ]

    @staticmethod
    def _owner_info(topic: Topic) -> JoinerInfo:
        if not topic.joiners:
            raise RepositoryError(ErrorCode.INCONSISTENT_DB)
        owner = topic.joiners[0]
        return JoinerInfo(owner.name, owner.user.number, owner.address)

    def topic_create(self, theme_name: str, name: str, address: Address, session: Any) -> Topic:
        """Create a transient topic; its creator becomes the first joiner."""
        creator = session.user
        if len(name) > MAX_TOPIC_NAME:
            raise RepositoryError(ErrorCode.TOPIC_NAME_TOO_BIG)
        theme = self._theme(theme_name)
        old = _find_topic(theme, name)
        if old is not None:
            raise RepositoryError(ErrorCode.TOPIC_DUPLICATE, owner=old.owner.name)
        topic = Topic(name, theme, creator)
        theme.topics.append(topic)
        creator.ntopics += 1
        self._join_internal(topic, address, session)
        session.add_topic(topic)
        return topic

    def topic_remove(self, theme_name: str, name: str, session: Any) -> None:
        """Remove a topic that only its owner still belongs to."""
        remover = session.user
        theme = self._theme(theme_name)
        topic = _find_topic(theme, name)
        if topic is None:
            raise RepositoryError(ErrorCode.TOPIC_INEXISTENT)
        if topic.owner is not remover:
            raise RepositoryError(ErrorCode.USER_NOT_TOPIC_OWNER)
        if topic.njoiners > 1:
            raise RepositoryError(ErrorCode.TOPIC_NOT_EMPTY)
        try:
            self._leave_internal(topic, remover)
        except RepositoryError:
            raise RepositoryError(ErrorCode.INCONSISTENT_DB) from None
        session.remove_topic(topic)
        _remove_identity(theme.topics, topic)
        remover.ntopics -= 1

    def topic_destroy(self, theme_name: str, name: str, session: Any) -> None:
        """Destroy a topic regardless of its joiners; only its owner may."""
        remover = session.user
        theme = self._theme(theme_name)
        topic = _find_topic(theme, name)
        if topic is None:
            raise RepositoryError(ErrorCode.TOPIC_INEXISTENT)
        if topic.owner is not remover:
            raise RepositoryError(ErrorCode.USER_NOT_TOPIC_OWNER)
        session.remove_topic(topic)
        self._internal_destroy(topic)
        _remove_identity(theme.topics, topic)
        remover.ntopics -= 1

    def topic_join(self, theme_name: str, name: str, address: Address, session: Any) -> int:
        """Add the session's user to a topic; return the joiner count."""
        topic = self._topic(theme_name, name)
        if topic.limit != 0 and topic.njoiners == topic.limit:
            raise RepositoryError(ErrorCode.TOPIC_TOO_MANY_JOINERS)
        if _find_joiner(topic, session.user) is not None:
            raise RepositoryError(ErrorCode.TOPIC_DUPLICATE_JOINER)
        self._join_internal(topic, address, session)
        session.join_topic(topic)
        return topic.njoiners

    def topic_leave(self, theme_name: str, name: str, session: Any) -> int:
        """Take the session's user out of a topic; return the joiner count."""
        user = session.user
        topic = self._topic(theme_name, name)
        if topic.owner is user and topic.njoiners > 1:
            raise RepositoryError(ErrorCode.TOPIC_OWNER_NOT_LAST)
        self._leave_internal(topic, user)
        return topic.njoiners

    def topics_collection(self, theme_name: str) -> NamesResult:
        """List a theme's topics as ``name owner joiners... njoiners``."""
        theme = self._theme(theme_name)
        lines = []
        for topic in theme.topics:
            others = "".join(
                f" {tj.name}" for tj in topic.joiners if tj.user is not topic.owner
            )
            lines.append(f"{topic.name} {topic.owner.name}{others} {topic.njoiners}\n")
        return NamesResult(theme.ntopics, "".join(lines))

    def topic_joiners(self, theme_name: str, topic_name: str, user: User) -> list[JoinerInfo]:
        """Return every joiner of a topic except ``user``, who must be one."""
        topic = self._topic(theme_name, topic_name)
        if _find_joiner(topic, user) is None:
            raise RepositoryError(ErrorCode.TOPIC_USER_NOT_JOINER)
        if topic.njoiners == 1:
            raise RepositoryError(ErrorCode.TOPIC_USER_ALONE)
        return self._fill_joiners(topic, user)

    def topic_owner_info(self, theme_name: str, name: str) -> JoinerInfo:
        """Return the name and address of a topic's owner."""
        return self._owner_info(self._topic(theme_name, name))

    def topic_joiner_search(
        self, theme_name: str, name: str, sender: User, user_dest: str
    ) -> JoinerInfo:
        """Return the address of ``user_dest`` when both users are joiners."""
        topic = self._topic(theme_name, name)
        if _find_joiner(topic, sender) is None:
            raise RepositoryError(ErrorCode.SEND_NOT_A_TOPIC_JOINER)
        dest = self.user_search(user_dest)
        if dest is None:
            raise RepositoryError(ErrorCode.USER_INEXISTENT)
        dest_joiner = _find_joiner(topic, dest)
        if dest_joiner is None:
            raise RepositoryError(ErrorCode.DEST_NOT_A_TOPIC_JOINER)
        return JoinerInfo(user_dest, dest.number, dest_joiner.address)

    def leave_on_close(self, topic: Topic, user: User) -> None:
        """Leave a joined topic when the user's connection closes."""
        owner_info = self._owner_info(topic)
        if self._warn_owner is not None:
            self._warn_owner(topic, owner_info, topic.njoiners)
        try:
            self._leave_internal(topic, user)
        except RepositoryError:
            log.debug("user %s was not a joiner of %s", user.name, topic.name)

    def remove_on_close(self, topic: Topic, user: User) -> None:
        """Remove a created topic when its owner's connection closes."""
        if topic.njoiners > 1:
            joiners = self._fill_joiners(topic, user)
            if self._warn_partners is not None:
                self._warn_partners(topic, joiners)
        self._internal_destroy(topic)
        _remove_identity(topic.theme.topics, topic)
        user.ntopics -= 1

    # users

    def user_search(self, name: str) -> Optional[User]:
        """Return the user called ``name``, or None."""
        return next((u for u in self.users if u.name == name), None)

    def user_get(self, name: str, passwd: str) -> Optional[User]:
        """Return the user when the password matches, else None."""
        user = self.user_search(name)
        if user is None or user.passwd_hash != passwd:
            return None
        return user

    def user_create(self, name: str, passwd: str, number: int) -> User:
        """Register a new user."""
        if len(name) > MAX_USER_NAME:
            raise RepositoryError(ErrorCode.USER_NAME_TOO_BIG)
        if len(passwd) > MAX_PASSWORD_SIZE:
            raise RepositoryError(ErrorCode.USER_PASS_TOO_BIG)
        if self.user_search(name) is not None:
            raise RepositoryError(ErrorCode.USER_DUPLICATE)
        user = User(name, passwd, number)
        self.users.append(user)
        return user

    def user_remove(self, user: User) -> None:
        """Unregister a user that owns and belongs to nothing."""
        found = self.user_search(user.name)
        if found is None:
            raise RepositoryError(ErrorCode.USER_INEXISTENT)
        if user.njoins > 0 or user.nthemes > 0 or user.ntopics > 0:
            raise RepositoryError(ErrorCode.USER_NOT_EMPTY)
        if any(u is user for u in self.users):
            _remove_identity(self.users, user)
        else:
            _remove_identity(self.users, found)

    def users_collection(self) -> NamesResult:
        """List every user as ``name number``."""
        text = "".join(f"{u.name} {u.number}\n" for u in self.users)
        return NamesResult(len(self.users), text)

    def clear(self) -> None:
        """Drop every theme, topic and user."""
        for theme in self.themes:
            for topic in theme.topics:
                self._internal_destroy(topic)
        self.themes.clear()
        self.users.clear()