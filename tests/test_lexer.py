import pytest

from minish.lexer import (
    Token,
    TokenType,
    identify_token_type,
    shell_operator_length,
    split_with_quotes,
    tokenize,
    word_length,
)


@pytest.mark.parametrize(
    "text, pos, expected",
    [
        ("a>>b", 1, 2),
        ("<<", 0, 2),
        ("<", 0, 1),
        (">x", 0, 1),
        ("|", 0, 1),
        ("||", 0, 1),
        ("x", 0, 0),
        ("|", 5, 0),
    ],
)
def test_shell_operator_length(text, pos, expected):
    assert shell_operator_length(text, pos) == expected


def test_word_length_stops_at_space():
    assert word_length("abc def") == len("abc")


def test_word_length_stops_at_operator():
    assert word_length("ab|c") == len("ab")
    assert word_length("ab>c") == len("ab")


def test_word_length_keeps_quoted_space():
    assert word_length('"a b" c') == len('"a b"')


def test_word_length_quote_then_letters_continue():
    assert word_length('"a b"c d') == len('"a b"c')


def test_word_length_unclosed_quote_runs_to_end():
    text = '"abc def'
    assert word_length(text) == len(text)


def test_split_separates_operators_without_spaces():
    assert split_with_quotes("ls -l|wc>>out") == ["ls", "-l", "|", "wc", ">>", "out"]


def test_split_keeps_quoted_words_whole():
    assert split_with_quotes('echo "a b"c d') == ["echo", '"a b"c', "d"]


def test_split_closing_quote_before_pipe():
    assert split_with_quotes('"a"|b') == ['"a"', "|", "b"]


def test_split_triple_angle_is_two_operators():
    assert split_with_quotes("cat <<<x") == ["cat", "<<", "<", "x"]


def test_split_unclosed_quote():
    assert split_with_quotes('echo "abc') == ["echo", '"abc']


@pytest.mark.parametrize("text", ["", "   ", "\t \n"])
def test_split_blank_gives_nothing(text):
    assert split_with_quotes(text) == []


@pytest.mark.parametrize(
    "text",
    ["echo hi | cat", "a>b<c", " x  y\tz ", "cat << EOF >> log|wc -l"],
)
def test_split_unquoted_preserves_non_blank_text(text):
    pieces = split_with_quotes(text)
    assert "".join(pieces) == "".join(text.split())
    assert all(piece.strip() == piece and piece for piece in pieces)


@pytest.mark.parametrize(
    "text",
    ['echo "a   b" \'c  d\'', '"x y"z|w', "a 'b | c' d"],
)
def test_split_pieces_appear_in_order(text):
    position = 0
    for piece in split_with_quotes(text):
        found = text.find(piece, position)
        assert found >= position
        assert text[position:found].strip() == ""
        position = found + len(piece)
    assert text[position:].strip() == ""


@pytest.mark.parametrize(
    "text, expected",
    [
        ("|", TokenType.PIPE),
        (">>", TokenType.APPEND),
        ("<<", TokenType.HEREDOC),
        ("<", TokenType.REDIRECT_IN),
        (">", TokenType.REDIRECT_OUT),
        ("$HOME", TokenType.EXPAND),
        ("'a'\"b\"", TokenType.EXPAND),
        ("'x'", TokenType.SINGLE_QUOTED),
        ('"x"', TokenType.DOUBLE_QUOTED),
        ("'", TokenType.WORD),
        ("echo", TokenType.WORD),
        ("", TokenType.WORD),
    ],
)
def test_identify_without_previous(text, expected):
    assert identify_token_type(text, None) is expected


@pytest.mark.parametrize(
    "previous", [TokenType.REDIRECT_IN, TokenType.REDIRECT_OUT, TokenType.APPEND]
)
def test_identify_file_after_redirection(previous):
    last = Token(">", previous)
    assert identify_token_type("out.txt", last) is TokenType.REDIRECT_FILE
    assert identify_token_type("|", last) is TokenType.REDIRECT_FILE


def test_identify_heredoc_key():
    last = Token("<<", TokenType.HEREDOC)
    assert identify_token_type("'EOF'", last) is TokenType.HEREDOC_KEY


def test_identify_after_pipe_is_normal():
    last = Token("|", TokenType.PIPE)
    assert identify_token_type("grep", last) is TokenType.WORD


def test_tokenize_types():
    tokens = tokenize("cat << EOF | grep x > out")
    assert [t.value for t in tokens] == ["cat", "<<", "EOF", "|", "grep", "x", ">", "out"]
    assert [t.kind for t in tokens] == [
        TokenType.WORD,
        TokenType.HEREDOC,
        TokenType.HEREDOC_KEY,
        TokenType.PIPE,
        TokenType.WORD,
        TokenType.WORD,
        TokenType.REDIRECT_OUT,
        TokenType.REDIRECT_FILE,
    ]


def test_tokenize_fresh_tokens_not_removed():
    tokens = tokenize("echo $USER 'lit'")
    assert [t.removed for t in tokens] == [False, False, False]
    assert [t.fd for t in tokens] == [None, None, None]
    assert [t.kind for t in tokens] == [
        TokenType.WORD,
        TokenType.EXPAND,
        TokenType.SINGLE_QUOTED,
    ]


def test_tokenize_blank_line():
    assert tokenize("   ") == []


def test_tokenize_values_match_split():
    line = 'echo "a b"c >> f | wc'
    assert [t.value for t in tokenize(line)] == split_with_quotes(line)