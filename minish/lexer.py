"""Splitting an input line into words and operators, and typing the tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .textutil import is_space

_QUOTES = "'\""


class TokenType(Enum):
    """What a token stands for on the command line."""

    WORD = auto()
    PIPE = auto()
    REDIRECT_IN = auto()
    REDIRECT_OUT = auto()
    REDIRECT_FILE = auto()
    HEREDOC_KEY = auto()
    HEREDOC = auto()
    APPEND = auto()
    EXPAND = auto()
    DOUBLE_QUOTED = auto()
    SINGLE_QUOTED = auto()


_OPERATOR_TYPES = {
    "|": TokenType.PIPE,
    ">>": TokenType.APPEND,
    "<<": TokenType.HEREDOC,
    "<": TokenType.REDIRECT_IN,
    ">": TokenType.REDIRECT_OUT,
}

_FILE_OPERATORS = frozenset(
    {TokenType.REDIRECT_IN, TokenType.REDIRECT_OUT, TokenType.APPEND}
)


@dataclass
class Token:
    """One token of an input line."""

    value: str
    kind: TokenType = TokenType.WORD
    removed: bool = False
    fd: Optional[int] = None


def shell_operator_length(text: str, pos: int) -> int:
    """Length of the operator starting at pos: 1 or 2, or 0 if there is none."""
    if pos < 0 or pos >= len(text):
        return 0
    ch = text[pos]
    if ch == "|":
        return 1
    if ch in "<>":
        return 2 if text[pos + 1:pos + 2] == ch else 1
    return 0


def word_length(text: str) -> int:
    """Length of the word at the start of text.

    A word ends at an unquoted blank or operator. Quoted runs are kept
    whole; a closing quote followed by a blank, an operator or the end of
    the text ends the word.
    """
    quote: Optional[str] = None
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        if quote is None:
            if ch in _QUOTES:
                quote = ch
            elif is_space(ch) or shell_operator_length(text, i):
                break
        elif ch == quote:
            quote = None
            after = i + 1
            if after >= n or is_space(text[after]) or shell_operator_length(text, after):
                return after
        i += 1
    return i


def split_with_quotes(text: str) -> list[str]:
    """Split a line into words and operators, respecting quotes."""
    pieces: list[str] = []
    n = len(text)
    i = 0
    while i < n:
        if is_space(text[i]):
            i += 1
            continue
        length = shell_operator_length(text, i) or word_length(text[i:])
        pieces.append(text[i:i + length])
        i += length
    return pieces


def _has_mixed_quotes(text: str) -> bool:
    return "'" in text and '"' in text


def identify_token_type(text: Optional[str], last: Optional[Token]) -> TokenType:
    """Type of a piece of text given the token before it."""
    if not text:
        return TokenType.WORD
    if last is not None:
        if last.kind is TokenType.HEREDOC:
            return TokenType.HEREDOC_KEY
        if last.kind in _FILE_OPERATORS:
            return TokenType.REDIRECT_FILE
    operator = _OPERATOR_TYPES.get(text)
    if operator is not None:
        return operator
    if _has_mixed_quotes(text):
        return TokenType.EXPAND
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        return TokenType.SINGLE_QUOTED
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return TokenType.DOUBLE_QUOTED
    if text.startswith("$"):
        return TokenType.EXPAND
    return TokenType.WORD


def tokenize(text: str) -> list[Token]:
    """Turn a line into a list of typed tokens; a blank line gives none."""
    tokens: list[Token] = []
    last: Optional[Token] = None
    for piece in split_with_quotes(text):
        token = Token(piece, identify_token_type(piece, last))
        tokens.append(token)
        last = token
    return tokens