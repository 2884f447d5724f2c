"""
Unit Tests for the plc0c Command-Line Interface
===============================================

Tests for compiling, running and dumping tokens through the plc0c command,
and for its exit codes.
"""

import pytest
from click.testing import CliRunner

from miniplc0.cli.errors import ExitCode
from miniplc0.cli.plc0c import main


PROGRAM = """\
begin
  const a = 1;
  var b = 2;
  var c;
  c = 3;
  print(a + b + c);
end
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "prog.plc0"
    path.write_text(PROGRAM)
    return path


class TestCliBasics:
    """Test help and version output."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile a miniplc0 program" in result.output
        assert "--run" in result.output

    def test_version(self, runner):
        from miniplc0 import __version__

        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "nope.plc0")])
        assert result.exit_code == ExitCode.INVALID_ARGS


class TestCliCompile:
    """Test writing listings."""

    def test_default_output_name(self, runner, source_file):
        result = runner.invoke(main, [str(source_file)])
        assert result.exit_code == 0
        output = source_file.with_suffix(".s0")
        assert "Compiled" in result.output
        assert output.read_text().splitlines() == [
            "LIT 1", "LIT 2", "LIT 0",
            "LIT 3", "STO 2",
            "LOD 0", "LOD 1", "ADD 0", "LOD 2", "ADD 0", "WRT 0",
        ]

    def test_explicit_output(self, runner, source_file, tmp_path):
        output = tmp_path / "out" / "listing.txt"
        output.parent.mkdir()
        result = runner.invoke(main, [str(source_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text().startswith("LIT 1\n")

    def test_numbered(self, runner, source_file):
        result = runner.invoke(main, [str(source_file), "-n"])
        assert result.exit_code == 0
        lines = source_file.with_suffix(".s0").read_text().splitlines()
        assert lines[0] == " 0: LIT 1"
        assert lines[10] == "10: WRT 0"

    def test_verbose(self, runner, source_file):
        result = runner.invoke(main, [str(source_file), "-v"])
        assert result.exit_code == 0
        assert "Emitted: 11 instructions" in result.output


class TestCliModes:
    """Test --run and --tokens."""

    def test_run(self, runner, source_file):
        result = runner.invoke(main, ["--run", str(source_file)])
        assert result.exit_code == 0
        assert result.output == "6\n"
        assert not source_file.with_suffix(".s0").exists()

    def test_tokens(self, runner, source_file):
        result = runner.invoke(main, ["--tokens", str(source_file)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Token(BEGIN, 0:0-0:5)"
        assert lines[-1] == "Token(END, 6:0-6:3)"


class TestCliErrors:
    """Test diagnostics and exit codes."""

    def test_compilation_error(self, runner, tmp_path):
        path = tmp_path / "bad.plc0"
        path.write_text("begin\n  const test = 1; \n  test = 2;\nend\n")
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "3:7: error: cannot assign to a constant 'test'" in result.output
        assert not path.with_suffix(".s0").exists()

    def test_lexical_error(self, runner, tmp_path):
        path = tmp_path / "bad.plc0"
        path.write_text("begin print(99999999999); end")
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "integer literal out of range" in result.output

    def test_runtime_error(self, runner, tmp_path):
        path = tmp_path / "div.plc0"
        path.write_text("begin print(1 / 0); end")
        result = runner.invoke(main, ["--run", str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Runtime error: instruction 2: division by zero" in result.output

    def test_undecodable_source(self, runner, tmp_path):
        path = tmp_path / "bin.plc0"
        path.write_bytes(b"\xff\xfe\xfd")
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "input could not be read" in result.output
