"""Tests for the linesift command line."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from linesift.cli import main
from linesift.cli.main import run_query
from linesift.filtering.registry import build_filter_set
from linesift.foundation.types.config import LinesiftConfig
from linesift.pipeline.line import Line

SAMPLE = "alpha beta gamma\nFooBar\nfoobar baz\nnothing here\nError: disk full\nerror: timeout\n"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestFilterCommand:
    def test_plain_output(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "--no-color", "foo"], input=SAMPLE)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["FooBar", "foobar baz"]

    def test_highlighted_output(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "error"], input=SAMPLE)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["Error: disk full", "error: timeout"]

    def test_matcher_option(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "-m", "CaseSensitive", "--no-color", "Foo"], input=SAMPLE)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["FooBar"]

    def test_multiple_terms(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "--no-color", "beta gamma"], input=SAMPLE)
        assert result.output.splitlines() == ["alpha beta gamma"]

    def test_reads_file_argument(self, runner: CliRunner, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        log.write_text(SAMPLE)
        result = runner.invoke(main, ["filter", "--no-color", "timeout", str(log)])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["error: timeout"]

    def test_null_separator(self, runner: CliRunner) -> None:
        result = runner.invoke(
            main,
            ["filter", "--null", "--no-color", "readme"],
            input="README.md\0/src/README.md\nsetup.py\0/src/setup.py\n",
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["/src/README.md"]

    def test_invalid_query(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "-m", "Regexp", "[bad"], input=SAMPLE)
        assert result.exit_code == 1
        assert "LS-1001" in result.output

    def test_invalid_query_json(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "-m", "Regexp", "--json", "[bad"], input=SAMPLE)
        assert result.exit_code == 1
        payload = json.loads(result.output.strip().splitlines()[-1])
        assert payload["error_id"] == "LS-1001"
        assert payload["context"]["term"] == "[bad"

    def test_unknown_matcher(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["filter", "-m", "Fuzzy", "x"], input=SAMPLE)
        assert result.exit_code == 1
        assert "LS-2001" in result.output

    def test_custom_matcher_from_config(self, runner: CliRunner, tmp_path: Path, python_cmd: str) -> None:
        script = "import sys; sys.stdout.writelines(l for l in sys.stdin if sys.argv[1] in l)"
        config = tmp_path / "config.yaml"
        config.write_text(
            "custom_matcher:\n"
            "  pygrep:\n"
            f"    cmd: {json.dumps(python_cmd)}\n"
            f"    args: [-c, {json.dumps(script)}, $QUERY]\n"
            "    buffer_threshold: 2\n"
        )
        result = runner.invoke(
            main,
            ["--config", str(config), "filter", "-m", "pygrep", "--no-color", "bar"],
            input=SAMPLE,
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["foobar baz"]


class TestMatchersCommand:
    def test_lists_builtins(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["matchers"])
        assert result.exit_code == 0, result.output
        for name in ("IgnoreCase", "CaseSensitive", "SmartCase", "Regexp"):
            assert name in result.output
        assert "*" in result.output

    def test_config_selects_current(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("matcher: Regexp\n")
        result = runner.invoke(main, ["--config", str(config), "matchers"])

        marked = [line for line in result.output.splitlines() if "*" in line]
        assert len(marked) == 1
        assert "Regexp" in marked[0]

    def test_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("sticky_selection: maybe\n")
        result = runner.invoke(main, ["--config", str(config), "matchers"])
        assert result.exit_code == 1
        assert "LS-5002" in result.output


class TestGlobalOptions:
    def test_persist_log_writes_session_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(main, ["--persist-log", "filter", "--no-color", "foo"], input=SAMPLE)
        assert result.exit_code == 0, result.output

        logs = list((tmp_path / "home" / ".linesift" / "logs").glob("session_*.log"))
        assert len(logs) == 1
        assert "Read 6 lines" in logs[0].read_text()

    def test_no_session_file_by_default(self, runner: CliRunner, tmp_path: Path) -> None:
        runner.invoke(main, ["filter", "--no-color", "foo"], input=SAMPLE)
        assert not (tmp_path / "home" / ".linesift" / "logs").exists()

    def test_project_config_without_option(self, runner: CliRunner, tmp_path: Path) -> None:
        project = tmp_path / ".linesift"
        project.mkdir()
        (project / "config.yaml").write_text("matcher: CaseSensitive\n")

        result = runner.invoke(main, ["filter", "--no-color", "Foo"], input=SAMPLE)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["FooBar"]

    def test_env_matcher_without_option(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LINESIFT_MATCHER", "SmartCase")
        result = runner.invoke(main, ["matchers"])

        marked = [line for line in result.output.splitlines() if "*" in line]
        assert len(marked) == 1
        assert "SmartCase" in marked[0]


class TestRunQuery:
    @pytest.mark.asyncio
    async def test_collects_results(self, sample_lines: list[Line]) -> None:
        filters = build_filter_set(LinesiftConfig())
        results, error = await run_query(sample_lines, filters, "baz")
        assert error is None
        assert [line.display_string() for line in results] == ["foobar baz"]

    @pytest.mark.asyncio
    async def test_empty_query_returns_source(self, sample_lines: list[Line]) -> None:
        filters = build_filter_set(LinesiftConfig())
        results, error = await run_query(sample_lines, filters, "")
        assert error is None
        assert results == sample_lines
