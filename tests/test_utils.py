import subprocess
import sys

import pytest

from dockforge.utils import CommandRunner, run_command, stream_command, unique_lines


def test_run_command_captures_output():
    return_code, stdout, stderr = run_command([sys.executable, "-c", "print('hello')"])
    assert return_code == 0
    assert stdout.strip() == "hello"
    assert stderr == ""


def test_run_command_passes_stdin():
    script = "import sys; print(sys.stdin.read().upper())"
    _, stdout, _ = CommandRunner().run([sys.executable, "-c", script], input_text="secret")
    assert stdout.strip() == "SECRET"


def test_run_command_check():
    with pytest.raises(subprocess.CalledProcessError):
        run_command([sys.executable, "-c", "import sys; sys.exit(2)"], check=True)
    return_code, _, _ = run_command([sys.executable, "-c", "import sys; sys.exit(2)"])
    assert return_code == 2


def test_stream_command_returns_exit_code_without_raising(tmp_path):
    assert stream_command([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path) == 3

    target = tmp_path / "out.bin"
    with open(target, "wb") as f:
        assert stream_command([sys.executable, "-c", "print('archive')"], stdout=f) == 0
    assert target.read_text().strip() == "archive"


def test_unique_lines():
    assert unique_lines("a\n\nb\na\n  c  \n") == ["a", "b", "c"]
