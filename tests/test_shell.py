import io

import pytest

from minish.builtins import ShellExit
from minish.shell import Shell, main

BASE_ENV = ["PATH=/bin:/usr/bin", "NAME=world"]


def _reader(lines):
    items = iter(lines)

    def read(prompt):
        item = next(items, None)
        if isinstance(item, BaseException):
            raise item
        return item

    return read


def test_run_line_echo(capsys):
    shell = Shell(BASE_ENV)
    assert shell.run_line("echo hello world") == 0
    assert capsys.readouterr().out == "hello world\n"


def test_run_line_expands_variables(capsys):
    shell = Shell(BASE_ENV)
    shell.run_line("echo $NAME")
    assert capsys.readouterr().out == "world\n"


def test_run_line_export_persists():
    shell = Shell(BASE_ENV)
    shell.run_line("export GREETING=hi")
    assert shell.env.get("GREETING") == "hi"


def test_last_status_is_expanded(capsys):
    shell = Shell(BASE_ENV)
    assert shell.run_line("no_such_command_here") == 127
    capsys.readouterr()
    shell.run_line("echo $?")
    assert capsys.readouterr().out == "127\n"


def test_bad_quote_sets_status_two(capsys):
    shell = Shell(BASE_ENV)
    assert shell.run_line("echo 'open") == 2
    assert capsys.readouterr().err == "bad quote\n"


def test_blank_line_keeps_status():
    shell = Shell(BASE_ENV)
    shell.status.record(5)
    assert shell.run_line("   ") == 5


def test_exit_raises_shell_exit():
    shell = Shell(BASE_ENV)
    with pytest.raises(ShellExit) as info:
        shell.run_line("exit 3")
    assert info.value.code == 3


def test_redirect_to_file(tmp_path):
    out = tmp_path / "out.txt"
    shell = Shell(BASE_ENV)
    shell.run_line(f"echo hi > {out}")
    assert out.read_text() == "hi\n"


def test_pipeline_to_file(tmp_path):
    out = tmp_path / "out.txt"
    shell = Shell(BASE_ENV)
    assert shell.run_line(f"echo one two | cat > {out}") == 0
    assert out.read_text() == "one two\n"


def test_heredoc_is_expanded(tmp_path):
    out = tmp_path / "out.txt"
    shell = Shell(BASE_ENV, read_line=_reader(["hi $NAME", "EOF"]))
    shell.run_line(f"cat << EOF > {out}")
    assert out.read_text() == "hi world\n"


def test_quoted_heredoc_delimiter_disables_expansion(tmp_path):
    out = tmp_path / "out.txt"
    shell = Shell(BASE_ENV, read_line=_reader(["hi $NAME", "EOF"]))
    shell.run_line(f"cat << 'EOF' > {out}")
    assert out.read_text() == "hi $NAME\n"


def test_interrupted_heredoc_sets_130():
    shell = Shell(BASE_ENV, read_line=_reader([KeyboardInterrupt()]))
    assert shell.run_line("cat << EOF") == 130


def test_shlvl_is_raised():
    assert Shell(["SHLVL=2"]).env.get("SHLVL") == "3"


def test_empty_environment_gets_defaults():
    shell = Shell([])
    assert shell.env.get("SHLVL") == "1"
    assert "OLDPWD" in shell.env


def test_loop_returns_exit_code(capsys):
    shell = Shell(BASE_ENV, read_line=_reader(["export X=1", "exit 7"]))
    assert shell.loop() == 7
    assert shell.env.get("X") == "1"


def test_loop_end_of_input_prints_exit(capsys):
    shell = Shell(BASE_ENV, read_line=_reader(["no_such_command_here"]))
    assert shell.loop() == 127
    assert capsys.readouterr().out.endswith("exit\n")


def test_loop_interrupt_at_prompt_sets_130(capsys):
    shell = Shell(BASE_ENV, read_line=_reader([KeyboardInterrupt()]))
    assert shell.loop() == 130


def test_main_rejects_arguments(capsys):
    assert main(["extra"]) == 127
    assert "no arguments please" in capsys.readouterr().err


def test_main_requires_terminal(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main([]) == 1
    assert "use terminal please" in capsys.readouterr().err