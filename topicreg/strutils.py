"""Helpers for splitting protocol lines into words."""

from __future__ import annotations

LF = "\n"
CR = "\r"


def is_space(c: str) -> bool:
    """True for the blanks that separate words: space and tab."""
    return c == " " or c == "\t"


def _char_at(text: str, i: int) -> str:
    return text[i] if i < len(text) else LF


def next_word(text: str, start: int, max_size: int) -> tuple[str, int]:
    """Return the next word of ``text`` from ``start`` and the index after it.

    A word holds fewer than ``max_size - 1`` characters. Raises ValueError
    when no word is found or the word is too long.
    """
    i = start
    while _char_at(text, i) != LF and is_space(_char_at(text, i)):
        i += 1
    chars: list[str] = []
    c = _char_at(text, i)
    while len(chars) < max_size - 1 and c != LF and not is_space(c):
        chars.append(c)
        i += 1
        c = _char_at(text, i)
    if not chars:
        raise ValueError("no word in line")
    if len(chars) == max_size - 1:
        raise ValueError("word too long")
    return "".join(chars), i


def check_line_termination(line: str, start: int) -> bool:
    """True when only blanks follow ``start`` up to the line end."""
    i = start
    while _char_at(line, i) != LF:
        if not is_space(line[i]):
            return False
        i += 1
    return True


def check_empty_line(line: str) -> bool:
    """True when the line holds nothing but blanks."""
    return check_line_termination(line, 0)