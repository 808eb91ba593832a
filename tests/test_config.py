from __future__ import annotations

import io
import logging
import os
from pathlib import Path

from nanobanana_engine.config import DEFAULT_MODEL, Settings
from nanobanana_engine.logging_config import configure_logging
from nanobanana_engine.utils import find_env_file, getenv_flag, load_dotenv


def test_settings_defaults() -> None:
    settings = Settings.from_env({})

    assert settings.model == DEFAULT_MODEL == "gemini-2.5-flash-image"
    assert settings.output_dir is None
    assert settings.events_path is None
    assert settings.log_level == "INFO"
    assert settings.dryrun is False


def test_settings_read_environment(tmp_path: Path) -> None:
    settings = Settings.from_env(
        {
            "NANOBANANA_MODEL": "gemini-3-pro-image-preview",
            "NANOBANANA_OUTPUT_DIR": str(tmp_path / "out"),
            "NANOBANANA_EVENTS_PATH": str(tmp_path / "events.jsonl"),
            "NANOBANANA_LOG_LEVEL": "debug",
            "NANOBANANA_DRYRUN": "true",
        }
    )

    assert settings.model == "gemini-3-pro-image-preview"
    assert settings.output_dir == tmp_path / "out"
    assert settings.events_path == tmp_path / "events.jsonl"
    assert settings.log_level == "DEBUG"
    assert settings.dryrun is True


def test_getenv_flag() -> None:
    assert getenv_flag("X", environ={"X": "yes"}) is True
    assert getenv_flag("X", environ={"X": "0"}) is False
    assert getenv_flag("X", True, environ={}) is True


def test_load_dotenv_respects_existing_values(tmp_path: Path, monkeypatch) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "# credentials\nexport NANOBANANA_TEST_KEY='from-file'\nNANOBANANA_MODEL=\"file-model\"\nbroken line\n",
        encoding="utf-8",
    )
    # setenv first so teardown removes the value written by load_dotenv
    monkeypatch.setenv("NANOBANANA_TEST_KEY", "placeholder")
    monkeypatch.delenv("NANOBANANA_TEST_KEY")
    monkeypatch.setenv("NANOBANANA_MODEL", "already-set")

    assert load_dotenv(env_path) is True
    assert os.environ["NANOBANANA_TEST_KEY"] == "from-file"
    assert os.environ["NANOBANANA_MODEL"] == "already-set"

    load_dotenv(env_path, override=True)
    assert os.environ["NANOBANANA_MODEL"] == "file-model"


def test_load_dotenv_missing_file(tmp_path: Path) -> None:
    assert load_dotenv(tmp_path / "missing.env") is False


def test_find_env_file_walks_up_to_project_root(tmp_path: Path) -> None:
    project = tmp_path / "project"
    nested = project / "a" / "b"
    nested.mkdir(parents=True)
    (project / "pyproject.toml").write_text('[project]\nname = "nanobanana"\n', encoding="utf-8")
    (tmp_path / ".env").write_text("OUTSIDE=1\n", encoding="utf-8")

    assert find_env_file(nested) is None

    (project / ".env").write_text("INSIDE=1\n", encoding="utf-8")
    assert find_env_file(nested) == project / ".env"


def test_configure_logging_writes_to_given_stream() -> None:
    stream = io.StringIO()
    logger = configure_logging("debug", stream=stream)
    configure_logging("debug", stream=stream)

    logging.getLogger("nanobanana_engine.engine").debug("hello %s", "there")

    assert stream.getvalue().count("hello there") == 1
    assert logger.level == logging.DEBUG
    configure_logging("INFO")
