from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Sequence

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from nanobanana_engine import server
from nanobanana_engine.config import Settings
from nanobanana_engine.engine import ImageGenerator
from nanobanana_engine.errors import ConfigurationError
from nanobanana_engine.providers.base import InputImage, ProviderResponse
from nanobanana_engine.providers.dryrun import DryRunClient


class _RecordingClient:
    name = "recording"
    model = "recording-image"

    def __init__(self) -> None:
        self._inner = DryRunClient()
        self.prompts: list[str] = []

    def generate(
        self,
        prompt: str,
        images: Sequence[InputImage] = (),
        *,
        seed: int | None = None,
    ) -> ProviderResponse:
        self.prompts.append(prompt)
        return self._inner.generate(prompt, images, seed=seed)


@pytest.fixture
def client(tmp_path: Path, monkeypatch) -> _RecordingClient:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    recording = _RecordingClient()
    server.set_generator(ImageGenerator(recording, output_dir=tmp_path / "out"))
    yield recording
    server.set_generator(None)


def test_registers_all_tools() -> None:
    tools = asyncio.run(server.mcp.list_tools())

    assert {tool.name for tool in tools} == {
        "generate_image",
        "edit_image",
        "restore_image",
        "remix_image",
        "generate_icon",
        "generate_pattern",
        "generate_story",
        "generate_diagram",
    }


def test_generate_image_returns_summary(client: _RecordingClient, tmp_path: Path) -> None:
    text = server.generate_image("a red fox", outputCount=2, seed=4)

    assert text.startswith("Successfully generated 2 image variation(s)\n\nGenerated files:\n• ")
    assert str(tmp_path / "out" / "a_red_fox.png") in text
    assert client.prompts == ["a red fox", "a red fox"]


def test_edit_image_missing_file_raises_tool_error(client: _RecordingClient) -> None:
    with pytest.raises(ToolError, match="Searched in:"):
        server.edit_image("add a hat", "missing.png")
    assert client.prompts == []


def test_remix_requires_two_files(client: _RecordingClient, tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"x")

    with pytest.raises(ToolError, match="got 1, need 2"):
        server.remix_image("merge", ["a.png"])


def test_generate_icon_builds_icon_prompt_per_size(client: _RecordingClient) -> None:
    text = server.generate_icon("coffee cup", sizes=[16, 32], style="flat")

    assert text.startswith("Successfully generated 2 image variation(s)")
    assert client.prompts == [
        "coffee cup, flat style app-icon, rounded corners, clean design, high quality, professional"
    ] * 2


def test_generate_pattern_makes_one_image(client: _RecordingClient) -> None:
    server.generate_pattern("leaves", type="texture", repeat="mirror")

    assert client.prompts == [
        "leaves, abstract style texture pattern, medium density, colorful colors, 256x256 tile size, high quality"
    ]


def test_generate_story_runs_each_step(client: _RecordingClient) -> None:
    text = server.generate_story("a seed grows", steps=3, type="timeline", layout="comic")

    assert text.startswith("Successfully generated complete 3-step timeline sequence")
    assert len(client.prompts) == 3
    assert client.prompts[2].endswith("smooth transition from previous step")


def test_generate_diagram_uses_diagram_prompt(client: _RecordingClient) -> None:
    server.generate_diagram("login flow", type="sequence", colors="mono")

    assert client.prompts[0].startswith("login flow, sequence diagram, professional style")
    assert "mono color scheme" in client.prompts[0]


def test_initialization_error_is_raised_on_every_call() -> None:
    error = ConfigurationError("No valid API key found.")
    server.set_generator(None, error)
    try:
        with pytest.raises(ConfigurationError):
            server.generate_image("a cat")
        with pytest.raises(ConfigurationError):
            server.generate_diagram("a cat")
    finally:
        server.set_generator(None)


def test_initialize_records_missing_credentials(monkeypatch: Any) -> None:
    for name in ("NANOBANANA_GEMINI_API_KEY", "NANOBANANA_GOOGLE_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    try:
        server.initialize(Settings())
        with pytest.raises(ConfigurationError, match="No valid API key found"):
            server.generate_image("a cat")
    finally:
        server.set_generator(None)


def test_initialize_with_dryrun(tmp_path: Path) -> None:
    try:
        server.initialize(Settings(dryrun=True, output_dir=tmp_path))
        text = server.generate_image("offline")
    finally:
        server.set_generator(None)

    assert (tmp_path / "offline.png").exists()
    assert "offline.png" in text
