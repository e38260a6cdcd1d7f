"""
Unit tests for the treefind command line.

Tests argument splitting, flag parsing, exit codes and output formats
using click's CliRunner.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from treefind.cli import main, split_arguments


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the handler the command installs on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def match_lines(output: str):
    return [line for line in output.splitlines() if line.count(" : ") == 2]


class TestSplitArguments:
    """Test cases for split_arguments."""

    def test_last_positional_is_path(self):
        """Test that the last positional argument is taken as the path."""
        assert split_arguments(["a.txt", "b.txt", "some/dir"], None) == (["a.txt", "b.txt"], [], "some/dir")

    def test_path_without_separator(self):
        """Test that the path does not need to contain a separator."""
        assert split_arguments(["a.txt", "."], None) == (["a.txt"], [], ".")

    def test_name_with_separator(self):
        """Test that a target name containing a separator stays a name."""
        names, _, path = split_arguments(["odd/name", "dir"], None)
        assert names == ["odd/name"]
        assert path == "dir"

    def test_path_option(self):
        """Test that --path makes every positional argument a name."""
        assert split_arguments(["a.txt", "b.txt"], "/data") == (["a.txt", "b.txt"], [], "/data")

    def test_unknown_options_separated(self):
        """Test that option-like arguments are returned as unknown options."""
        names, unknown, path = split_arguments(["-x", "a.txt", "--bogus", "dir"], None)

        assert names == ["a.txt"]
        assert unknown == ["-x", "--bogus"]
        assert path == "dir"

    def test_missing_path(self):
        """Test that having no positional arguments is a usage error."""
        with pytest.raises(click.UsageError):
            split_arguments([], None)


class TestMainCommand:
    """Test cases for the treefind command."""

    def setup_method(self):
        """Create root/{a.txt, sub/{a.txt, b.txt}}."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir).resolve()
        (self.test_root / "sub").mkdir()
        for file_path in ("a.txt", "sub/a.txt", "sub/b.txt"):
            (self.test_root / file_path).write_text(file_path)

        self.runner = CliRunner()

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_non_recursive(self):
        """Test that a flat search prints one match."""
        result = self.runner.invoke(main, ["a.txt", str(self.test_root)])

        assert result.exit_code == 0
        lines = match_lines(result.output)
        assert len(lines) == 1
        worker_id, name, path = lines[0].split(" : ")
        assert worker_id.isdigit()
        assert name == "a.txt"
        assert path == str(self.test_root / "a.txt")

    def test_recursive(self):
        """Test that -R finds matches in subdirectories."""
        result = self.runner.invoke(main, ["-R", "a.txt", str(self.test_root)])

        assert result.exit_code == 0
        paths = sorted(line.split(" : ")[2] for line in match_lines(result.output))
        assert paths == [str(self.test_root / "a.txt"), str(self.test_root / "sub" / "a.txt")]

    @pytest.mark.parametrize("flags", [["-Ri"], ["-iR"], ["-R", "-i"], ["--recursive", "--ignore-case"]])
    def test_combined_flags(self, flags):
        """Test that short flags may be combined in any order."""
        result = self.runner.invoke(main, flags + ["A.TXT", "B.txt", str(self.test_root)])

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 3

    def test_case_sensitive(self):
        """Test that names are case-sensitive without -i."""
        result = self.runner.invoke(main, ["-R", "A.TXT", str(self.test_root)])

        assert result.exit_code == 0
        assert match_lines(result.output) == []

    def test_unknown_option_reported(self):
        """Test that an unknown option is reported but does not stop the search."""
        result = self.runner.invoke(main, ["-x", "a.txt", str(self.test_root)])

        assert result.exit_code == 0
        assert "unknown option: -x" in result.output
        assert len(match_lines(result.output)) == 1

    def test_relative_path(self, monkeypatch):
        """Test that a relative path is resolved against the working directory."""
        monkeypatch.chdir(self.test_root)

        result = self.runner.invoke(main, ["-R", "b.txt", "sub"])

        assert result.exit_code == 0
        lines = match_lines(result.output)
        assert lines[0].split(" : ")[2] == str(self.test_root / "sub" / "b.txt")

    def test_path_option(self):
        """Test the explicit --path option."""
        result = self.runner.invoke(main, ["--path", str(self.test_root), "-R", "a.txt", "b.txt"])

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 3

    def test_no_names(self):
        """Test that an empty target set prints nothing and succeeds."""
        result = self.runner.invoke(main, ["-R", "--path", str(self.test_root)])

        assert result.exit_code == 0
        assert match_lines(result.output) == []

    def test_missing_path(self):
        """Test that a path that does not resolve is an error."""
        result = self.runner.invoke(main, ["a.txt", str(self.test_root / "missing")])

        assert result.exit_code == 1
        assert "Cannot resolve search path" in result.output

    def test_no_arguments(self):
        """Test that calling without arguments is a usage error."""
        result = self.runner.invoke(main, [])

        assert result.exit_code == 2
        assert "Missing PATH" in result.output

    def test_unreadable_root(self):
        """Test that an unreadable root gives no matches and exit code 0."""
        with patch("treefind.tools.dir_walker.os.scandir", side_effect=PermissionError(13, "Permission denied")):
            result = self.runner.invoke(main, ["-R", "a.txt", str(self.test_root)])

        assert result.exit_code == 0
        assert match_lines(result.output) == []
        assert "Skipping subtree" in result.output

    def test_json_format(self):
        """Test JSON lines output."""
        result = self.runner.invoke(main, ["--format", "json", "-R", "b.txt", str(self.test_root)])

        assert result.exit_code == 0
        records = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
        assert len(records) == 1
        assert records[0]["matched_name"] == "b.txt"
        assert records[0]["full_path"] == str(self.test_root / "sub" / "b.txt")

    def test_fanout_strategy(self):
        """Test that the fanout strategy finds the same matches."""
        result = self.runner.invoke(
            main, ["--strategy", "fanout", "--max-concurrent", "2", "-R", "a.txt", str(self.test_root)]
        )

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 2

    def test_summary(self):
        """Test that --summary reports statistics."""
        result = self.runner.invoke(main, ["--summary", "-R", "a.txt", str(self.test_root)])

        assert result.exit_code == 0
        assert "Found 2 matches" in result.output

    def test_config_file(self):
        """Test that settings come from a YAML file."""
        config_path = self.test_root / "settings.yaml"
        config_path.write_text("recursive: true\nignore_case: true\n")

        result = self.runner.invoke(main, ["--config", str(config_path), "A.TXT", str(self.test_root)])

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 2

    def test_command_line_overrides_config(self):
        """Test that command line options win over the settings file."""
        config_path = self.test_root / "settings.yaml"
        config_path.write_text("output_format: json\n")

        result = self.runner.invoke(
            main, ["--config", str(config_path), "--format", "text", "a.txt", str(self.test_root)]
        )

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 1

    def test_invalid_config_file(self):
        """Test that a bad settings file is an error."""
        config_path = self.test_root / "settings.yaml"
        config_path.write_text("strategy: sideways\n")

        result = self.runner.invoke(main, ["--config", str(config_path), "a.txt", str(self.test_root)])

        assert result.exit_code == 1
        assert "Invalid walk strategy" in result.output

    def test_write_config(self):
        """Test that --write-config writes a template and exits."""
        output_path = self.test_root / "out" / "treefind.yaml"

        result = self.runner.invoke(main, ["--write-config", str(output_path)])

        assert result.exit_code == 0
        assert output_path.exists()
        assert "strategy: sequential" in output_path.read_text()

    def test_name_option_with_leading_dash(self):
        """Test that --name searches for a name that looks like an option."""
        (self.test_root / "sub" / "-draft.txt").write_text("draft")

        result = self.runner.invoke(main, ["-R", "--name=-draft.txt", str(self.test_root)])

        assert result.exit_code == 0
        lines = match_lines(result.output)
        assert [line.split(" : ")[2] for line in lines] == [str(self.test_root / "sub" / "-draft.txt")]
        assert "unknown option" not in result.output

    def test_name_option_with_positional_names(self):
        """Test that --name adds to the positional target names."""
        result = self.runner.invoke(main, ["-R", "-n", "b.txt", "a.txt", str(self.test_root)])

        assert result.exit_code == 0
        assert len(match_lines(result.output)) == 3

    def test_config_file_not_utf8(self):
        """Test that an undecodable settings file is an error."""
        config_path = self.test_root / "settings.yaml"
        config_path.write_bytes(b"strategy: \xff\n")

        result = self.runner.invoke(main, ["--config", str(config_path), "a.txt", str(self.test_root)])

        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output


class TestUndecodableNames:
    """Test cases for names that are not valid UTF-8."""

    def setup_method(self):
        """Create root/{a.txt, <0xff>/a.txt, <0xff>.txt}."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = os.fsencode(Path(self.temp_dir).resolve())
        try:
            os.mkdir(os.path.join(self.test_root, b"\xff"))
            for file_path in (b"a.txt", b"\xff/a.txt", b"\xff.txt"):
                with open(os.path.join(self.test_root, file_path), "wb") as f:
                    f.write(file_path)
        except OSError as e:
            shutil.rmtree(self.temp_dir)
            pytest.skip(f"filesystem rejects non UTF-8 names: {e}")

        self.runner = CliRunner()

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_text_output_keeps_raw_bytes(self):
        """Test that paths below an undecodable directory are printed as found on disk."""
        result = self.runner.invoke(main, ["-R", "a.txt", os.fsdecode(self.test_root)])

        assert result.exit_code == 0, result.output
        lines = [line for line in result.stdout_bytes.splitlines() if line.count(b" : ") == 2]
        paths = sorted(line.split(b" : ")[2] for line in lines)
        assert paths == sorted([self.test_root + b"/a.txt", self.test_root + b"/\xff/a.txt"])

    def test_undecodable_target_name(self):
        """Test searching for a name that is not valid UTF-8."""
        result = self.runner.invoke(main, [os.fsdecode(b"\xff.txt"), os.fsdecode(self.test_root)])

        assert result.exit_code == 0, result.output
        lines = [line for line in result.stdout_bytes.splitlines() if line.count(b" : ") == 2]
        assert len(lines) == 1
        assert lines[0].split(b" : ")[1] == b"\xff.txt"

    def test_json_output(self):
        """Test that JSON output escapes undecodable bytes."""
        result = self.runner.invoke(main, ["--format", "json", "-R", "a.txt", os.fsdecode(self.test_root)])

        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in result.stdout_bytes.splitlines() if line.startswith(b"{")]
        assert sorted(record["full_path"] for record in records) == sorted([
            os.fsdecode(self.test_root + b"/a.txt"),
            os.fsdecode(self.test_root + b"/\xff/a.txt"),
        ])
