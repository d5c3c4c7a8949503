"""Unit tests for the lockwatch command line."""

from __future__ import annotations

import typing as typ

import pytest

import lockwatch.cli as cli
from lockwatch.cli import HarvestMode, main, parse_args

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestParseArgs:
    """Tests for mode selection and argument validation."""

    def test_discover_is_the_default_mode(self) -> None:
        """Without a mode flag the run discovers."""
        args = parse_args(["--database-url", "harvest.db", "--iterations", "3"])

        assert args.mode is HarvestMode.DISCOVER
        assert args.iterations == 3

    def test_populate_comments_mode(self) -> None:
        """--populate-comments selects enrichment and needs no iterations."""
        args = parse_args(["-d", "harvest.db", "--populate-comments"])

        assert args.mode is HarvestMode.ENRICH_COMMENTS

    def test_export_mode_with_output(self) -> None:
        """--export selects aggregation with the given report path."""
        args = parse_args(["-d", "harvest.db", "--export", "-o", "out.csv"])

        assert args.mode is HarvestMode.EXPORT
        assert str(args.output) == "out.csv"

    @pytest.mark.parametrize(
        "argv",
        [
            ["-d", "harvest.db"],
            ["-d", "harvest.db", "-i", "-1"],
            ["-d", "harvest.db", "--populate-comments", "--export"],
            ["-i", "3"],
        ],
        ids=["missing-iterations", "negative", "two-modes", "missing-database"],
    )
    def test_invalid_arguments_exit(self, argv: list[str]) -> None:
        """Invalid argument combinations exit with a usage error."""
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)

        assert excinfo.value.code == 2


@pytest.fixture
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep femtologging out of CLI tests."""
    monkeypatch.setattr(cli, "configure_logging", lambda level: ("INFO", False))


@pytest.mark.usefixtures("quiet_logging")
def test_main_requires_github_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without GITHUB_TOKEN the run stops before touching the store."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    ran: list[object] = []
    monkeypatch.setattr(cli, "run_mode", lambda *args: ran.append(args))

    assert main(["-d", "harvest.db", "-i", "1"]) == 1
    assert ran == []


@pytest.mark.usefixtures("quiet_logging")
def test_main_rejects_invalid_tuning(monkeypatch: pytest.MonkeyPatch) -> None:
    """A malformed LOCKWATCH_* variable is a configuration error."""
    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    monkeypatch.setenv("LOCKWATCH_MAX_PAGES", "lots")

    assert main(["-d", "harvest.db", "--populate-comments"]) == 1


@pytest.mark.usefixtures("quiet_logging")
def test_main_exports_empty_report(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Export against a fresh store writes a header-only report."""
    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    output = tmp_path / "activity.csv"

    exit_code = main(
        ["-d", str(tmp_path / "harvest.db"), "--export", "-o", str(output)]
    )

    assert exit_code == 0
    assert output.read_text(encoding="utf-8").splitlines() == [
        "id_comment,id_issue,commits_before,commits_after"
    ]
