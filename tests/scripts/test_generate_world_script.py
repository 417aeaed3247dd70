"""Tests for the generate_world command line script."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path
from types import ModuleType

import pytest

from vellum.environment.generators import GenerationFailed

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "generate_world.py"


@pytest.fixture(scope="module")
def script() -> ModuleType:
    """Import the script as a module without running main()."""
    spec = importlib.util.spec_from_file_location("generate_world_script", SCRIPT_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestGenerateWorldScript:
    """End-to-end runs of main()."""

    def test_text_output(
        self, script: ModuleType, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """The default output has a title, a map and the travel links."""
        assert script.main(["--seed", "42"]) == 0

        out = capsys.readouterr().out
        assert "Seed: 42" in out
        assert "Travel links:" in out
        map_lines = [
            line for line in out.splitlines() if line and set(line) <= set("SFMWB@ ")
        ]
        assert len(map_lines) == 10

    def test_json_output_with_clamped_size(
        self, script: ModuleType, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Sizes outside [8, 12] are clamped before generation."""
        argv = ["--seed", "7", "--width", "3", "--height", "40", "--json"]
        assert script.main(argv) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["width"] == 8
        assert data["height"] == 12
        assert len(data["terrain"]) == 12
        assert all(len(row) == 8 for row in data["terrain"])
        assert set(data["connections"]) == {
            str(index) for index in range(len(data["locations"]))
        }

    def test_name_is_seed_and_title(
        self, script: ModuleType, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--name hashes into the seed and becomes the title."""
        assert script.main(["--name", "abc", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "abc"
        assert data["seed"] == 96354

    def test_color_output_uses_ansi_escapes(
        self, script: ModuleType, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--color wraps glyphs in 24-bit colour codes."""
        assert script.main(["--seed", "5", "--color"]) == 0

        assert "\033[38;2;" in capsys.readouterr().out

    def test_failure_exit_code(
        self,
        script: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """An exhausted restart budget exits with status 1."""
        def always_fail(*args, **kwargs):
            raise GenerationFailed("no luck", 0)

        monkeypatch.setattr(script, "generate_world", always_fail)

        assert script.main(["--seed", "1"]) == 1
        assert capsys.readouterr().out == ""

    def test_parse_seed(self, script: ModuleType) -> None:
        """Numeric seeds become ints; other strings stay strings."""
        assert script.parse_seed("12") == 12
        assert script.parse_seed("misty") == "misty"
        assert script.parse_seed(None) is None
