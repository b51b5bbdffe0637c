"""Character classes, number parsing and field splitting used by the shell."""

from __future__ import annotations

_SPACE_CHARS = "\t\n\v\f\r "
_ASCII_LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_ASCII_DIGITS = "0123456789"
_OPERATORS = "|<>"
_QUOTES = "'\""

_U64_MASK = (1 << 64) - 1
_LLONG_MAX = (1 << 63) - 1


def is_space(char: str) -> bool:
    """True for a single blank character: tab, newline, vt, ff, cr or space."""
    return len(char) == 1 and char in _SPACE_CHARS


def _is_alpha(char: str) -> bool:
    return len(char) == 1 and char in _ASCII_LETTERS


def is_name_char(char: str) -> bool:
    """True for an ASCII letter, digit or underscore."""
    return len(char) == 1 and (char in _ASCII_LETTERS or char in _ASCII_DIGITS or char == "_")


def is_valid_identifier(text: str) -> bool:
    """Check a variable name, looking only at the part before any '='."""
    if not text:
        return False
    if not (_is_alpha(text[0]) or text[0] == "_"):
        return False
    name = text.split("=", 1)[0]
    return all(is_name_char(ch) for ch in name[1:])


def _wrap_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def atoi(text: str) -> int:
    """Parse a leading decimal integer the way the shell does.

    Leading blanks and one sign are accepted, parsing stops at the first
    non-digit and text without digits gives 0. The result is truncated to a
    32-bit signed integer. OverflowError is raised when the magnitude passes
    the largest 64-bit signed value.
    """
    i = 0
    n = len(text)
    while i < n and is_space(text[i]):
        i += 1
    sign = 1
    if i < n and text[i] in "+-":
        if text[i] == "-":
            sign = -1
        i += 1
    result = 0
    while i < n and text[i] in _ASCII_DIGITS:
        result = (result * 10 + ord(text[i]) - ord("0")) & _U64_MASK
        if result > _LLONG_MAX:
            raise OverflowError(f"numeric value out of range: {text!r}")
        i += 1
    return _wrap_int32(result * sign)


def _plain_word_length(text: str, start: int) -> int:
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _OPERATORS:
            return i - start
        if ch in _QUOTES:
            close = text.find(ch, i + 1)
            if close < 0:
                return n - start
            i = close
        elif is_space(ch):
            break
        i += 1
    return i - start


def _field_length(text: str, start: int) -> int:
    ch = text[start]
    if ch == "|":
        return 1
    if ch in "<>":
        end = start
        while end < len(text) and text[end] in "<>":
            end += 1
        return end - start
    return _plain_word_length(text, start)


def split_fields(text: str) -> list[str]:
    """Split on blanks, keeping quoted runs whole and operators apart."""
    fields: list[str] = []
    i = 0
    n = len(text)
    while True:
        while i < n and is_space(text[i]):
            i += 1
        if i >= n:
            break
        length = _field_length(text, i)
        fields.append(text[i:i + length])
        i += length
    return fields


def split_on(text: str, sep: str) -> list[str]:
    """Split on a separator character, dropping empty pieces."""
    return [piece for piece in text.split(sep) if piece]