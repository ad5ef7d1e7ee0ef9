import pytest

from topicreg.strutils import (
    check_empty_line,
    check_line_termination,
    is_space,
    next_word,
)


def test_is_space():
    assert is_space(" ")
    assert is_space("\t")
    assert not is_space("\n")
    assert not is_space("a")


def test_two_words_then_termination():
    line = "john secret\n"
    user, pos = next_word(line, 0, 32)
    word, pos = next_word(line, pos, 16)
    assert (user, word) == ("john", "secret")
    assert check_line_termination(line, pos)
    assert line[pos] == "\n"


def test_leading_blanks_and_tabs_skipped():
    line = " \t theme\ttopic  \n"
    first, pos = next_word(line, 0, 32)
    second, pos = next_word(line, pos, 32)
    assert [first, second] == ["theme", "topic"]
    assert check_line_termination(line, pos)


def test_no_word_raises():
    with pytest.raises(ValueError):
        next_word("   \n", 0, 10)


def test_no_word_after_last():
    line = "only\n"
    _, pos = next_word(line, 0, 10)
    with pytest.raises(ValueError):
        next_word(line, pos, 10)


def test_word_filling_buffer_is_rejected():
    word = "x" * 9
    with pytest.raises(ValueError):
        next_word(word + "\n", 0, 10)


def test_word_just_below_limit_is_accepted():
    word = "y" * 8
    got, pos = next_word(word + "\n", 0, 10)
    assert got == word
    assert pos == len(word)


def test_line_without_terminator_ends_at_string_end():
    got, pos = next_word("abc", 0, 10)
    assert got == "abc"
    assert check_line_termination("abc", pos)


def test_trailing_text_is_not_termination():
    line = "a b\n"
    _, pos = next_word(line, 0, 10)
    assert not check_line_termination(line, pos)


def test_empty_lines():
    assert check_empty_line("\n")
    assert check_empty_line(" \t \n")
    assert not check_empty_line("  x\n")
    assert not check_empty_line("\r\n")