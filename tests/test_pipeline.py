import errno
import io
import os
import sys

import pytest

from pipechain.pipeline import (
    UsageError,
    exit_code_for,
    main,
    main_pair,
    read_here_doc,
    run_pipeline,
)


@pytest.fixture
def infile(tmp_path):
    path = tmp_path / "in.txt"
    path.write_text("hello world\nsecond line\n")
    return path


@pytest.mark.parametrize(
    "error, expected",
    [
        (FileNotFoundError(errno.ENOENT, "missing"), 127),
        (PermissionError(errno.EACCES, "denied"), 126),
        (OSError(errno.EIO, "io"), 1),
    ],
)
def test_exit_code_for(error, expected):
    assert exit_code_for(error) == expected


def test_usage_error_keeps_code():
    error = UsageError("bad", 3)
    assert error.exit_code == 3
    assert error.message == "bad"


def test_read_here_doc_stops_at_limiter():
    stream = io.StringIO("a\nb\nEOF\nc\n")
    assert read_here_doc("EOF", stream) == "a\nb\n"


def test_read_here_doc_needs_whole_line():
    stream = io.StringIO("a\nEOFX\nEOF")
    assert read_here_doc("EOF", stream) == "a\nEOFX\nEOF"


def test_two_commands(infile, tmp_path):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", "tr a-z A-Z"], str(infile), str(out), os.environ)
    assert status == 0
    assert out.read_text() == infile.read_text().upper()


def test_three_commands(infile, tmp_path):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", "grep second", "tr a-z A-Z"], str(infile), str(out), os.environ)
    assert status == 0
    assert out.read_text() == "SECOND LINE\n"


def test_quoted_argument(infile, tmp_path):
    out = tmp_path / "out.txt"
    run_pipeline(["cat", "grep 'hello world'"], str(infile), str(out), os.environ)
    assert out.read_text() == "hello world\n"


def test_last_status_returned(infile, tmp_path):
    out = tmp_path / "out.txt"
    assert run_pipeline(["cat", "grep nomatchhere"], str(infile), str(out), os.environ) == 1


def test_missing_last_command(infile, tmp_path, capsys):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", "nosuchcmdxyz"], str(infile), str(out), os.environ)
    assert status == 127
    assert "Command not found : nosuchcmdxyz" in capsys.readouterr().err
    assert out.exists()


def test_exec_failure_absolute_path(infile, tmp_path, capsys):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", "/nonexistent/prog"], str(infile), str(out), os.environ)
    assert status == 127
    assert "execve:" in capsys.readouterr().err


def test_exec_directory_is_denied(infile, tmp_path):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", str(tmp_path)], str(infile), str(out), os.environ)
    assert status == 126


def test_invalid_infile(tmp_path, capsys):
    out = tmp_path / "out.txt"
    status = run_pipeline(["cat", "wc -l"], str(tmp_path / "absent"), str(out), os.environ)
    assert status == 0
    assert "inputfile:" in capsys.readouterr().err
    assert out.read_text().strip() == "0"


def test_truncates_outfile(infile, tmp_path):
    out = tmp_path / "out.txt"
    out.write_text("old content that is long\n")
    run_pipeline(["cat", "grep second"], str(infile), str(out), os.environ)
    assert out.read_text() == "second line\n"


def test_here_doc_appends(tmp_path):
    out = tmp_path / "out.txt"
    out.write_text("kept\n")
    status = run_pipeline(["cat", "cat"], "alpha\n", str(out), os.environ, here_doc=True)
    assert status == 0
    assert out.read_text() == "kept\nalpha\n"


def test_env_passed(infile, tmp_path):
    out = tmp_path / "out.txt"
    env = {"PATH": os.environ["PATH"], "MARKER": "present"}
    run_pipeline(["cat", "env"], str(infile), str(out), env, pass_env=True)
    assert "MARKER=present" in out.read_text()


def test_env_withheld(infile, tmp_path):
    out = tmp_path / "out.txt"
    env = {"PATH": os.environ["PATH"], "MARKER": "present"}
    run_pipeline(["cat", "env"], str(infile), str(out), env, pass_env=False)
    assert "MARKER" not in out.read_text()


def test_outfile_unwritable_raises(infile, tmp_path):
    with pytest.raises(OSError):
        run_pipeline(["cat", "cat"], str(infile), str(tmp_path / "no" / "out"), os.environ)


def test_empty_command_list_rejected(infile, tmp_path):
    with pytest.raises(ValueError):
        run_pipeline([], str(infile), str(tmp_path / "out"), os.environ)


def test_main_too_few_arguments(capsys):
    assert main(["in", "cat", "out"]) == 3
    assert "Allowed format : infile cmd1 cmd-N outfile" in capsys.readouterr().err


def test_main_here_doc_too_few(capsys):
    assert main(["here_doc", "EOF", "cat", "out"]) == 2
    assert "here_doc need at least 5 arguments" in capsys.readouterr().err


def test_main_chain(infile, tmp_path):
    out = tmp_path / "out.txt"
    assert main([str(infile), "cat", "grep hello", "tr a-z A-Z", str(out)]) == 0
    assert out.read_text() == "HELLO WORLD\n"


def test_main_here_doc(tmp_path, monkeypatch):
    out = tmp_path / "out.txt"
    monkeypatch.setattr(sys, "stdin", io.StringIO("one\ntwo\nEND\nthree\n"))
    assert main(["here_doc", "END", "cat", "cat", str(out)]) == 0
    assert out.read_text() == "one\ntwo\n"


def test_main_bad_outfile(infile, tmp_path, capsys):
    assert main([str(infile), "cat", "cat", str(tmp_path / "no" / "out")]) == 1
    assert "outfile:" in capsys.readouterr().err


def test_main_pair_wrong_count(capsys):
    assert main_pair(["in", "cat", "cat"]) == 1
    assert "Allowed format : infile cmd1 cmd2 outfile" in capsys.readouterr().err


def test_main_pair_runs(infile, tmp_path):
    out = tmp_path / "out.txt"
    assert main_pair([str(infile), "cat", "tr a-z A-Z", str(out)]) == 0
    assert out.read_text() == infile.read_text().upper()


def test_main_pair_missing_command(infile, tmp_path):
    out = tmp_path / "out.txt"
    assert main_pair([str(infile), "cat", "nosuchcmdxyz", str(out)]) == 127