from __future__ import annotations

from pathlib import Path

import pytest

from nanobanana_engine import cli
from nanobanana_engine.engine import ImageGenerator
from nanobanana_engine.providers.dryrun import DryRunClient


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def test_parser_reads_generate_options() -> None:
    args = cli._build_parser().parse_args(
        ["generate", "a cat", "--count", "3", "--styles", "anime", "sketch", "--seed", "9", "--preview"]
    )

    assert args.command == "generate"
    assert args.output_count == 3
    assert args.styles == ["anime", "sketch"]
    assert args.seed == 9
    assert args.preview is True
    assert args.no_preview is False


def test_run_command_prints_summary(workspace: Path, capsys) -> None:
    generator = ImageGenerator(DryRunClient(), output_dir=workspace / "out")
    args = cli._build_parser().parse_args(["story", "a seed grows", "--steps", "2", "--type", "process"])

    assert cli.run_command(args, generator) == 0

    out = capsys.readouterr().out
    assert out.startswith("Successfully generated complete 2-step process sequence")
    assert "processstep1a_seed_grows.png" in out


def test_run_command_reports_failure(workspace: Path, capsys) -> None:
    generator = ImageGenerator(DryRunClient(), output_dir=workspace / "out")
    args = cli._build_parser().parse_args(["remix", "merge", "--files", "only.png"])

    assert cli.run_command(args, generator) == 1

    err = capsys.readouterr().err
    assert "At least two input images are required for a remix." in err


def test_main_dryrun_generates_file(workspace: Path, monkeypatch) -> None:
    out_dir = workspace / "images-out"
    events_path = workspace / "events.jsonl"
    monkeypatch.setenv("NANOBANANA_DRYRUN", "1")
    monkeypatch.setenv("NANOBANANA_OUTPUT_DIR", str(out_dir))
    monkeypatch.setenv("NANOBANANA_EVENTS_PATH", str(events_path))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["icon", "rocket", "--sizes", "32"])

    assert excinfo.value.code == 0
    assert (out_dir / "rocket_modern_style_appicon_roun.png").exists()
    assert events_path.exists()


def test_main_without_credentials_exits_with_error(workspace: Path, monkeypatch, capsys) -> None:
    for name in ("NANOBANANA_DRYRUN", "NANOBANANA_GEMINI_API_KEY", "NANOBANANA_GOOGLE_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "a cat"])

    assert excinfo.value.code == 1
    assert "No valid API key found" in capsys.readouterr().err


def test_main_without_command_prints_help(workspace: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1
    assert "usage: nanobanana" in capsys.readouterr().out
