from __future__ import annotations

import pytest

import main as cli


def test_list_feeds_prints_catalog(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--list-feeds"]) == 0

    output = capsys.readouterr().out
    assert "CONFIGURED FEEDS" in output
    assert "QNA" in output
    assert "Al Arab" in output


def test_non_positive_duration_is_rejected(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--duration", "0"]) == 2
    assert "--duration" in capsys.readouterr().out


def test_parser_defaults() -> None:
    args = cli.build_parser().parse_args([])

    assert args.once is False
    assert args.no_translate is False
    assert args.duration is None
