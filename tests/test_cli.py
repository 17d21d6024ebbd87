"""Tests for the typer CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from outlinewriter import cli
from outlinewriter.config import Settings
from outlinewriter.llm.generation import GenerationClient, GenerationFailure
from outlinewriter.orchestrator.runner import Orchestrator

from conftest import FakeService

runner = CliRunner()


@pytest.fixture
def fake_backend(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeService:
    service = FakeService()

    def from_settings(settings: Settings) -> Orchestrator:
        return Orchestrator(GenerationClient(service), settings)

    monkeypatch.setattr(cli.Orchestrator, "from_settings", staticmethod(from_settings))
    monkeypatch.setenv("OUTLINEWRITER_BATCH_DELAY_S", "0")
    monkeypatch.chdir(tmp_path)
    return service


def test_outline_command_lists_points(tmp_path: Path) -> None:
    """It should print the parsed points of an outline file."""

    path = tmp_path / "outline.txt"
    path.write_text("Essay\n  First\n  Second\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["outline", str(path)])

    assert result.exit_code == 0, result.output
    assert "First" in result.output
    assert "Second" in result.output


def test_outline_command_needs_a_source() -> None:
    """It should fail when neither a file nor --sample is given."""

    result = runner.invoke(cli.app, ["outline"])
    assert result.exit_code != 0


def test_write_generates_the_whole_essay(fake_backend: FakeService, tmp_path: Path) -> None:
    """It should generate every point and write the composed essay with the overrides applied."""

    path = tmp_path / "outline.txt"
    path.write_text("Essay\n  First\n  Second\n", encoding="utf-8")
    out = tmp_path / "out" / "essay.md"

    result = runner.invoke(
        cli.app, ["write", str(path), "-o", str(out), "--language", "English", "--tone", "Wry"]
    )

    assert result.exit_code == 0, result.output
    text = out.read_text(encoding="utf-8")
    assert text.count("text for ") == 3
    assert len(fake_backend.calls) == 1
    assert "Output language: English." in fake_backend.prompts[0]
    assert "Tone: Wry." in fake_backend.prompts[0]


def test_write_sample_outline(fake_backend: FakeService, tmp_path: Path) -> None:
    """It should generate the built-in sample outline in four batches."""

    result = runner.invoke(cli.app, ["write", "--sample"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "essay.md").exists()
    assert len(fake_backend.calls) == 4


def test_write_rejects_invalid_detail_level(fake_backend: FakeService, tmp_path: Path) -> None:
    """It should reject an invalid detail level before calling the service."""

    result = runner.invoke(cli.app, ["write", "--sample", "--detail-level", "huge"])
    assert result.exit_code != 0
    assert fake_backend.calls == []


def test_write_exits_non_zero_when_points_fail(fake_backend: FakeService, tmp_path: Path) -> None:
    """It should exit with code 1 and print the halt reason when a batch fails."""

    def failing(prompt, schema):
        raise GenerationFailure("service unavailable")

    fake_backend.handler = failing
    result = runner.invoke(cli.app, ["write", "--sample"])

    assert result.exit_code == 1
    assert "service unavailable" in result.output
    assert (tmp_path / "essay.md").read_text(encoding="utf-8") == "\n"
