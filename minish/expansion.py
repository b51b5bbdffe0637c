"""Variable and quote expansion of tokens and here-document lines."""

from __future__ import annotations

from typing import Iterable, Optional

from .env import Environment
from .lexer import Token, TokenType
from .textutil import is_name_char, is_space, split_fields

_QUOTED_KINDS = frozenset({TokenType.SINGLE_QUOTED, TokenType.DOUBLE_QUOTED})


def remove_quotes(value: Optional[str], kind: TokenType) -> str:
    """Strip one pair of matching outer quotes from a quoted token's text."""
    if value is None:
        return ""
    if (
        kind in _QUOTED_KINDS
        and len(value) >= 2
        and value[0] == value[-1]
        and value[0] in "'\""
    ):
        return value[1:-1]
    return value


def is_assignment(value: Optional[str]) -> bool:
    """True for NAME=... where NAME holds only name characters and no leading digit."""
    if not value or "=" not in value:
        return False
    name = value.split("=", 1)[0]
    if name and not (name[0].isascii() and (name[0].isalpha() or name[0] == "_")):
        return False
    return all(is_name_char(ch) for ch in name)


def _read_variable(text: str, i: int, env: Environment) -> tuple[str, int]:
    """Expand the variable name starting at i; return the text and the new index."""
    start = i
    while i < len(text) and is_name_char(text[i]):
        i += 1
    if i == start:
        return "$", i
    return env.get(text[start:i]) or "", i


def expand_mixed(value: Optional[str], env: Environment, last_status: int = 0) -> tuple[str, bool]:
    """Expand variables and drop quotes in text that may mix both kinds of quote.

    Returns the expanded text and whether any quote character was seen.
    """
    if value is None:
        return "", False
    parts: list[str] = []
    in_single = in_double = found_quotes = False
    i = 0
    n = len(value)
    while i < n:
        ch = value[i]
        if ch == "'":
            found_quotes = True
            if in_double:
                parts.append(ch)
            else:
                in_single = not in_single
            i += 1
        elif ch == '"':
            found_quotes = True
            if in_single:
                parts.append(ch)
            else:
                in_double = not in_double
            i += 1
        elif ch == "$" and not in_single:
            i += 1
            if i < n and value[i] == "?":
                parts.append(str(last_status))
                i += 1
            else:
                text, i = _read_variable(value, i, env)
                parts.append(text)
        else:
            parts.append(ch)
            i += 1
    return "".join(parts), found_quotes


def expand_assignment(value: str, env: Environment, last_status: int = 0) -> str:
    """Expand the right-hand side of NAME=VALUE, keeping the name as written."""
    name, _, rest = value.partition("=")
    expanded, _ = expand_mixed(rest, env, last_status)
    return f"{name}={expanded}"


def needs_word_splitting(value: Optional[str]) -> bool:
    """True when the text holds a blank character."""
    return bool(value) and any(is_space(ch) for ch in value)


def _needs_expansion(token: Token) -> bool:
    if token.kind is TokenType.EXPAND:
        return True
    return token.kind is TokenType.WORD and any(ch in token.value for ch in "$'\"")


def _split_into_words(token: Token, expanded: str) -> list[Token]:
    words = split_fields(expanded)
    token.kind = TokenType.WORD
    if not words:
        token.value = ""
        token.removed = True
        return [token]
    token.value = words[0]
    return [token] + [Token(word) for word in words[1:]]


def _expand_token(token: Token, env: Environment, last_status: int) -> list[Token]:
    if token.kind is TokenType.WORD and is_assignment(token.value):
        token.value = expand_assignment(token.value, env, last_status)
    elif token.kind is TokenType.SINGLE_QUOTED:
        token.value = remove_quotes(token.value, token.kind)
        token.kind = TokenType.WORD
    elif token.kind is TokenType.DOUBLE_QUOTED:
        inner = remove_quotes(token.value, token.kind)
        token.value, _ = expand_mixed(inner, env, last_status)
        token.kind = TokenType.WORD
    elif _needs_expansion(token):
        expanded, was_quoted = expand_mixed(token.value, env, last_status)
        if not expanded:
            token.value = ""
            token.kind = TokenType.WORD
            token.removed = True
        elif was_quoted or not needs_word_splitting(expanded):
            token.value = expanded
            token.kind = TokenType.WORD
        else:
            return _split_into_words(token, expanded)
    return [token]


def expand_tokens(tokens: Iterable[Token], env: Environment, last_status: int = 0) -> list[Token]:
    """Expand every token; unquoted expansions with blanks become several words.

    The given tokens are updated in place; the returned list also holds the
    words created by splitting.
    """
    result: list[Token] = []
    for token in tokens:
        result.extend(_expand_token(token, env, last_status))
    return result


def expand_heredoc_line(line: Optional[str], env: Environment, last_status: int = 0) -> Optional[str]:
    """Expand $NAME and $? in a here-document line; quotes are left alone.

    A '$' followed by a character that cannot start a name is dropped; a
    '$' at the very end of the line is kept.
    """
    if line is None:
        return None
    parts: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        if line[i] == "$" and i + 1 < n:
            i += 1
            following = line[i]
            if following == "?":
                parts.append(str(last_status))
                i += 1
            elif is_name_char(following):
                text, i = _read_variable(line, i, env)
                parts.append(text)
        else:
            parts.append(line[i])
            i += 1
    return "".join(parts)