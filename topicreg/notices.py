"""Datagrams sent to topic joiners on behalf of the registration service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence


@dataclass(frozen=True)
class Datagram:
    """A notification and the messaging address it is sent to."""

    payload: bytes
    address: Any

    @property
    def text(self) -> str:
        """The payload as text."""
        return self.payload.decode("utf-8")


def _encode(text: str) -> bytes:
    return text.encode("utf-8")


def _partner_notice(
    action: str, user: str, theme: str, topic: str, njoiners: int, address: Any
) -> Datagram:
    text = f"{action}\n{user} {theme} {topic} {njoiners}\n\n"
    return Datagram(_encode(text), address)


def enter_partner(user: str, theme: str, topic: str, njoiners: int, address: Any) -> Datagram:
    """Tell a topic owner that ``user`` joined; ``njoiners`` counts after the join."""
    return _partner_notice("ENTER_PARTNER", user, theme, topic, njoiners, address)


def leave_partner(user: str, theme: str, topic: str, njoiners: int, address: Any) -> Datagram:
    """Tell a topic owner that ``user`` left the topic."""
    return _partner_notice("LEAVE_PARTNER", user, theme, topic, njoiners, address)


def to_partners(
    action: str,
    user: str,
    theme: str,
    topic: str,
    lines: Iterable[str],
    joiners: Sequence[Any],
) -> list[Datagram]:
    """One datagram per joiner: a header naming the sender, then the body lines."""
    header = f"{action}\n{user} {theme} {topic} {len(joiners)}\n"
    payload = _encode(header + "".join(lines))
    return [Datagram(payload, joiner.address) for joiner in joiners]


def direct_message(
    user: str,
    theme: str,
    topic: str,
    user_dest: str,
    lines: Iterable[str],
    address: Any,
) -> Datagram:
    """A message from ``user`` to ``user_dest`` within a topic."""
    header = f"MESSAGE\n{user} {theme} {topic} {user_dest}\n"
    return Datagram(_encode(header + "".join(lines)), address)