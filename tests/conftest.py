"""
Pytest configuration and shared fixtures for msixmaker tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from PIL import Image
import pytest
import yaml

from msixmaker.build.context import BuildContext
from msixmaker.config import BuildConfig
from msixmaker.logging import SilentLogger, set_global_logger


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.steps: list[tuple[int, int, str]] = []
        self.warnings: list[tuple[str, str]] = []
        self.messages: list[tuple[str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.steps.append((step, total, message))

    def warning(self, prefix: str, message: str) -> None:
        self.warnings.append((prefix, message))

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append((prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append((prefix, message))


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Restore the silent global logger after every test."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Install and return a RecordingLogger as the global logger."""
    logger = RecordingLogger()
    set_global_logger(logger)
    return logger


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def icon_png(tmp_test_dir: Path) -> Path:
    """Provide a 64x32 opaque red PNG (non-square to exercise padding)."""
    path = tmp_test_dir / "icons" / "icon.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (64, 32), (255, 0, 0, 255)).save(path)
    return path


@pytest.fixture
def wallpaper_png(tmp_test_dir: Path) -> Path:
    """Provide a 200x100 opaque blue PNG used as banner background."""
    path = tmp_test_dir / "icons" / "wallpaper.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (200, 100), (0, 0, 255, 255)).save(path)
    return path


@pytest.fixture
def staged_app(tmp_test_dir: Path) -> Path:
    """
    Provide a staged application tree.

    Layout:
        app/bin/app.exe
        tools/helper.exe
        resources/app.asar
        readme.txt
    """
    root = tmp_test_dir / "staged"
    (root / "app" / "bin").mkdir(parents=True)
    (root / "tools").mkdir()
    (root / "resources").mkdir()
    (root / "app" / "bin" / "app.exe").write_bytes(b"MZ app")
    (root / "tools" / "helper.exe").write_bytes(b"MZ helper")
    (root / "resources" / "app.asar").write_bytes(b"asar")
    (root / "readme.txt").write_text("hello", encoding="utf-8")
    return root


@pytest.fixture
def build_config(icon_png: Path) -> BuildConfig:
    """Provide a minimal BuildConfig with a configured publisher."""
    return BuildConfig(app_icon=icon_png, publisher="CN=Test Publisher")


@pytest.fixture
def build_context(staged_app: Path, tmp_test_dir: Path) -> BuildContext:
    """Provide a BuildContext over the staged_app fixture."""
    return BuildContext(
        app_name="MyApp",
        version="1.2.3",
        target_arch="x64",
        staged_dir=staged_app,
        output_dir=tmp_test_dir / "out",
    )


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("msix.yaml", {"key": "value"})
    """
    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
